"""Engine limits.

Defaults are safe for templates written by trusted authors; servers that accept
templates from less trusted sources can tighten them through the environment:

    FORMENGINE_MAX_EXPRESSION_LENGTH=1024
    FORMENGINE_MAX_DEPTH=32
"""

import logging
import os

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, ValidationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "FORMENGINE_"
MAX_DEPTH_LIMIT = 128


def _int_env(name: str) -> int | None:
    raw = os.getenv(ENV_PREFIX + name)
    if not raw:
        return None
    try:
        value = int(raw.strip())
    except ValueError:
        return None
    return value if value > 0 else None


class EngineConfig(BaseModel):
    """Parser limits applied to every formula and rule expression."""

    model_config = ConfigDict(frozen=True)

    max_expression_length: PositiveInt = 4096
    # nesting of parentheses, operators and member access; capped below the recursion limit
    max_depth: PositiveInt = Field(default=100, le=MAX_DEPTH_LIMIT)

    @classmethod
    def from_env(cls) -> "EngineConfig":
        overrides = {}
        for field_name in cls.model_fields:
            value = _int_env(field_name.upper())
            if value is None:
                continue
            try:
                cls(**{field_name: value})
            except ValidationError:
                logger.warning("ignoring %s%s=%d: out of range", ENV_PREFIX, field_name.upper(), value)
                continue
            overrides[field_name] = value
        return cls(**overrides)


DEFAULT_CONFIG = EngineConfig()
