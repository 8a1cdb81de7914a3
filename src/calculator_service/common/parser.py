"""Parse and evaluate arithmetic expressions safely."""
from collections.abc import Callable as ABCCallable
import math
import operator
from typing import Callable, List, Optional, Tuple

from calculator_service.common.errors import (
    DivisionByZeroError,
    ExpressionSyntaxError,
    ResourceLimitError,
)
from calculator_service.common.lexer import Token, TokenKind, tokenize


# Type alias for operator functions (taking two floats, returning a float)
OperatorFn: ABCCallable[[float, float], float] = Callable[[float, float], float]

# Mapping of operator symbols to (precedence, function)
OPERATORS: dict[str, Tuple[int, OperatorFn]] = {
    "+": (1, operator.add),
    "-": (1, operator.sub),
    "*": (2, operator.mul),
    "/": (2, operator.truediv),
}

ADDITIVE = 1
MULTIPLICATIVE = 2

DEFAULT_MAX_DEPTH = 100


class ExpressionParser:
    """
    Parse and evaluate a token sequence safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Safe, deterministic computation
        - Recursion bounded by ``max_depth`` nested parentheses

    Grammar (each rule reduces immediately to a float):
        expression := product (("+" | "-") product)*
        product    := term (("*" | "/") term)*
        term       := NUMBER | "(" expression ")"

    Operators of equal precedence are folded left to right, so
    ``8 / 4 / 2`` is ``(8 / 4) / 2`` and ``2 + 3 * 4`` is ``2 + (3 * 4)``.
    """

    def __init__(self, tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH):
        self.tokens = tokens
        self.max_depth = max_depth
        self.cursor = 0
        self.depth = 0

    def parse(self) -> float:
        """
        Reduce the whole token sequence to a single value.

        :return: Computed result as float
        :rtype: float
        :raises ExpressionSyntaxError: If the tokens do not form one complete expression
        :raises DivisionByZeroError: If a divisor reduces to exactly zero
        :raises ResourceLimitError: If nesting is too deep or the value overflows
        """
        if not self.tokens:
            raise ExpressionSyntaxError("Empty expression")

        value = self._expression()

        # Anything left over (e.g. an extra ")" or a second number) is an error
        token = self._peek()
        if token is not None:
            if token.kind is TokenKind.RIGHT_PAREN:
                raise ExpressionSyntaxError("Unmatched ')'", self.cursor)
            raise ExpressionSyntaxError(f"Unexpected token {token}", self.cursor)

        return value

    def _peek(self) -> Optional[Token]:
        if self.cursor < len(self.tokens):
            return self.tokens[self.cursor]
        return None

    def _next_operator(self, precedence: int) -> Optional[str]:
        """Consume and return the next operator if it has the given precedence."""
        token = self._peek()
        if token is None or token.kind is not TokenKind.OPERATOR:
            return None
        if OPERATORS[token.value][0] != precedence:
            return None
        self.cursor += 1
        return token.value

    def _apply(self, symbol: str, left: float, right: float) -> float:
        if symbol == "/" and right == 0:
            raise DivisionByZeroError("Division by zero")
        result = OPERATORS[symbol][1](left, right)
        if not math.isfinite(result):
            raise ResourceLimitError("Result out of range")
        return result

    def _expression(self) -> float:
        left = self._product()
        while True:
            symbol = self._next_operator(ADDITIVE)
            if symbol is None:
                return left
            left = self._apply(symbol, left, self._product())

    def _product(self) -> float:
        left = self._term()
        while True:
            symbol = self._next_operator(MULTIPLICATIVE)
            if symbol is None:
                return left
            left = self._apply(symbol, left, self._term())

    def _term(self) -> float:
        token = self._peek()

        if token is None:
            raise ExpressionSyntaxError("Missing operand at end of expression", self.cursor)

        if token.kind is TokenKind.NUMBER:
            self.cursor += 1
            if not math.isfinite(token.value):
                raise ResourceLimitError("Number out of range", token.position)
            return token.value

        if token.kind is TokenKind.LEFT_PAREN:
            if self.depth >= self.max_depth:
                raise ResourceLimitError(f"Nesting deeper than {self.max_depth} levels", self.cursor)
            opening = self.cursor
            self.cursor += 1
            self.depth += 1
            value = self._expression()
            closing = self._peek()
            if closing is None or closing.kind is not TokenKind.RIGHT_PAREN:
                raise ExpressionSyntaxError("Unmatched '('", opening)
            self.cursor += 1
            self.depth -= 1
            return value

        if token.kind is TokenKind.OPERATOR:
            raise ExpressionSyntaxError(f"Missing operand before '{token.value}'", self.cursor)

        raise ExpressionSyntaxError("Unexpected ')'", self.cursor)


def evaluate_tokens(tokens: List[Token], max_depth: int = DEFAULT_MAX_DEPTH) -> float:
    """
    Evaluate an already tokenized expression.

    :param List[Token] tokens: Tokens produced by the lexer
    :param int max_depth: Maximum parenthesis nesting

    :return: Computed result as float
    :rtype: float
    """
    return ExpressionParser(tokens, max_depth=max_depth).parse()


def evaluate(expr: str, max_depth: int = DEFAULT_MAX_DEPTH) -> float:
    """
    Evaluate an arithmetic expression safely.

    :param str expr: Arithmetic expression string
    :param int max_depth: Maximum parenthesis nesting

    :return: Computed result as float
    :rtype: float
    :raises EvaluationError: If the expression is invalid, divides by zero or exceeds limits
    """
    return evaluate_tokens(tokenize(expr), max_depth=max_depth)


def format_result(value: float) -> str:
    """Format a value as fixed point with exactly six fractional digits."""
    return f"{value:.6f}"
