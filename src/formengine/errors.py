"""Exception types raised while parsing and evaluating form expressions."""


class ExpressionError(Exception):
    """Base class for any failure tied to a single formula or rule expression."""


class ParseError(ExpressionError):
    def __init__(self, msg: str, col: int):
        super().__init__(f"col {col}: {msg}")
        self.col = col


class EvaluationError(ExpressionError):
    pass


class ForbiddenKeyError(EvaluationError):
    """Raised when an expression names a key that reaches object internals."""

    def __init__(self, key: str):
        super().__init__(f"forbidden key: {key!r}")
        self.key = key


class UnsupportedExpressionError(EvaluationError):
    pass


class UnsupportedOperatorError(EvaluationError):
    pass


class TemplateError(Exception):
    """A template file could not be read, decoded or validated."""
