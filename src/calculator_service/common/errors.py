"""Error taxonomy raised by the expression engine."""
from typing import Optional


class EvaluationError(ValueError):
    """Base class for every rejection produced while evaluating an expression."""

    kind: str = "evaluation error"

    def __init__(self, message: str, position: Optional[int] = None):
        self.message = message
        self.position = position
        if position is not None:
            message = f"{message} at position {position}"
        super().__init__(message)


class LexError(EvaluationError):
    """
    The raw text holds a character outside the grammar or a malformed number.

    ``position`` is the index of the offending character in the source string.
    """

    kind = "lexical error"

    def __init__(self, reason: str, position: int):
        self.reason = reason
        super().__init__(reason, position)


class ExpressionSyntaxError(EvaluationError):
    """
    The token sequence is structurally invalid.

    Covers mismatched parentheses, missing operands, empty input and trailing tokens.
    ``position`` is a token index when known.
    """

    kind = "syntax error"


class DivisionByZeroError(EvaluationError, ZeroDivisionError):
    """The right operand of a division reduced to exactly zero."""

    kind = "division by zero"


class ResourceLimitError(EvaluationError):
    """Nesting is deeper than allowed or the value left the finite float range."""

    kind = "resource limit"
