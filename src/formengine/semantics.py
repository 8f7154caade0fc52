"""Primitive value semantics for form expressions.

Form values follow the conventions of a dynamic web-form language: numbers are
IEEE doubles, `null` (None) and `undefined` (UNDEFINED) are distinct, `+`
concatenates strings, `==` coerces and `===` does not.

Member access is restricted to own data: mapping keys, list indices and list
`length`. Python attributes are never read.
"""

import math
import re
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Union

from .errors import ForbiddenKeyError

FORBIDDEN_KEYS = frozenset({"__proto__", "constructor", "prototype"})

MAX_SAFE_INTEGER = 2**53


class Undefined:
    """The `undefined` value: what a missing field or property reads as."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "undefined"

    def __reduce__(self):
        return (Undefined, ())


UNDEFINED = Undefined()

Value = Union[int, float, str, bool, None, Undefined]

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_RADIX_RE = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_RADIX = {"x": 16, "o": 8, "b": 2}


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    return is_number(value) and math.isfinite(_float(value))


def is_array(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _float(value: int | float) -> float:
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def type_of(value: Any) -> str:
    """Type tag used by strict equality."""
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    return "object"


def number(x: float) -> int | float:
    """Normalise an arithmetic result: exact integers come back as int."""
    if isinstance(x, float) and x.is_integer() and abs(x) <= MAX_SAFE_INTEGER:
        return int(x)
    return x


def _string_to_number(text: str) -> float:
    s = text.strip()
    if not s:
        return 0.0
    if _DECIMAL_RE.fullmatch(s):
        return float(s)
    if m := _RADIX_RE.fullmatch(s):
        try:
            return _float(int(m.group(2), _RADIX[m.group(1).lower()]))
        except ValueError:
            return math.nan
    if s in ("Infinity", "+Infinity"):
        return math.inf
    if s == "-Infinity":
        return -math.inf
    return math.nan


def to_number(value: Any) -> float:
    if value is UNDEFINED:
        return math.nan
    if value is None:
        return 0.0
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if is_number(value):
        return _float(value)
    if isinstance(value, str):
        return _string_to_number(value)
    return _string_to_number(to_string(value))


def to_string(value: Any) -> str:
    if value is UNDEFINED:
        return "undefined"
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if is_number(value):
        return _number_to_string(_float(value))
    if isinstance(value, str):
        return value
    if is_array(value):
        return ",".join("" if v is None or v is UNDEFINED else to_string(v) for v in value)
    return "[object Object]"


def _number_to_string(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x == 0:
        return "0"
    # shortest round-trip digits, laid out the way the form language prints numbers
    _, digits, exponent = Decimal(repr(abs(x))).normalize().as_tuple()
    ds = "".join(map(str, digits))
    k = len(ds)
    n = exponent + k
    prefix = "-" if x < 0 else ""
    if k <= n <= 21:
        return prefix + ds + "0" * (n - k)
    if 0 < n <= 21:
        return prefix + ds[:n] + "." + ds[n:]
    if -6 < n <= 0:
        return prefix + "0." + "0" * -n + ds
    e = n - 1
    mantissa = ds if k == 1 else ds[0] + "." + ds[1:]
    return f"{prefix}{mantissa}e{'+' if e > 0 else '-'}{abs(e)}"


def truthy(value: Any) -> bool:
    if value is UNDEFINED or value is None:
        return False
    if isinstance(value, bool):
        return value
    if is_number(value):
        x = _float(value)
        return not (x == 0 or math.isnan(x))
    if isinstance(value, str):
        return value != ""
    return True


def to_primitive(value: Any) -> Any:
    if type_of(value) == "object":
        return to_string(value)
    return value


# ---------------------------------------------------------------------------
# Operators
# ---------------------------------------------------------------------------


def add(left: Any, right: Any) -> Any:
    left, right = to_primitive(left), to_primitive(right)
    if isinstance(left, str) or isinstance(right, str):
        return to_string(left) + to_string(right)
    return number(to_number(left) + to_number(right))


def subtract(left: Any, right: Any) -> int | float:
    return number(to_number(left) - to_number(right))


def multiply(left: Any, right: Any) -> int | float:
    return number(to_number(left) * to_number(right))


def divide(left: Any, right: Any) -> int | float:
    a, b = to_number(left), to_number(right)
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return number(a / b)


def remainder(left: Any, right: Any) -> int | float:
    a, b = to_number(left), to_number(right)
    if math.isnan(a) or math.isnan(b) or math.isinf(a) or b == 0:
        return math.nan
    if math.isinf(b):
        return number(a)
    return number(math.fmod(a, b))


def power(left: Any, right: Any) -> int | float:
    a, b = to_number(left), to_number(right)
    if math.isnan(b):
        return math.nan
    if b == 0:
        return 1
    if math.isnan(a):
        return math.nan
    if abs(a) == 1 and math.isinf(b):
        return math.nan
    if a == 0 and b < 0:
        odd = b.is_integer() and int(b) % 2 == 1
        return math.copysign(math.inf, a) if odd else math.inf
    try:
        return number(math.pow(a, b))
    except OverflowError:
        odd = b.is_integer() and int(b) % 2 == 1
        return -math.inf if a < 0 and odd else math.inf
    except ValueError:
        # negative base with a fractional exponent
        return math.nan


def _compare(left: Any, right: Any, op) -> bool:
    left, right = to_primitive(left), to_primitive(right)
    if isinstance(left, str) and isinstance(right, str):
        return op(left, right)
    a, b = to_number(left), to_number(right)
    if math.isnan(a) or math.isnan(b):
        return False
    return op(a, b)


def less_than(left: Any, right: Any) -> bool:
    return _compare(left, right, lambda a, b: a < b)


def less_equal(left: Any, right: Any) -> bool:
    return _compare(left, right, lambda a, b: a <= b)


def greater_than(left: Any, right: Any) -> bool:
    return _compare(left, right, lambda a, b: a > b)


def greater_equal(left: Any, right: Any) -> bool:
    return _compare(left, right, lambda a, b: a >= b)


def strict_equals(left: Any, right: Any) -> bool:
    kind = type_of(left)
    if kind != type_of(right):
        return False
    if kind == "number":
        return _float(left) == _float(right)
    if kind == "object":
        return left is right
    return left == right


def loose_equals(left: Any, right: Any) -> bool:
    lt, rt = type_of(left), type_of(right)
    if lt == rt:
        return strict_equals(left, right)
    if {lt, rt} == {"null", "undefined"}:
        return True
    if lt in ("null", "undefined") or rt in ("null", "undefined"):
        return False
    if lt == "boolean":
        return loose_equals(to_number(left), right)
    if rt == "boolean":
        return loose_equals(left, to_number(right))
    if lt == "number" and rt == "string":
        return to_number(left) == to_number(right)
    if lt == "string" and rt == "number":
        return to_number(left) == to_number(right)
    if lt == "object":
        return loose_equals(to_primitive(left), right)
    if rt == "object":
        return loose_equals(left, to_primitive(right))
    return False


# ---------------------------------------------------------------------------
# Property access
# ---------------------------------------------------------------------------


def property_key(key: Any) -> str | None:
    """Normalise a member key; only strings and numbers are usable keys."""
    if isinstance(key, str):
        return key
    if is_number(key):
        return to_string(key)
    return None


def safe_get(target: Any, key: str) -> Any:
    """Own-property lookup on `target`.

    Raises ForbiddenKeyError for keys that name object internals, whatever the
    target. Anything that is not an own key of a mapping or list reads as UNDEFINED.
    """
    if key in FORBIDDEN_KEYS:
        raise ForbiddenKeyError(key)
    if isinstance(target, Mapping):
        if key in target:
            return target[key]
        return UNDEFINED
    if is_array(target):
        if key == "length":
            return len(target)
        if key.isascii() and key.isdigit() and str(int(key)) == key and int(key) < len(target):
            return target[int(key)]
    return UNDEFINED
