"""Validate raw expression text and split it into tokens."""
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Union

from calculator_service.common.errors import LexError


class TokenKind(Enum):
    NUMBER = "number"
    OPERATOR = "operator"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"


@dataclass(frozen=True)
class Token:
    """
    Atomic lexical unit.

    ``value`` holds the float of a NUMBER, the symbol of an OPERATOR and None for parentheses.
    ``position`` is the index of the first source character, kept for diagnostics only.
    """

    kind: TokenKind
    value: Optional[Union[float, str]] = None
    position: int = 0

    def __str__(self) -> str:
        if self.kind is TokenKind.NUMBER:
            return repr(self.value)
        if self.kind is TokenKind.OPERATOR:
            return str(self.value)
        return self.kind.value


OPERATOR_SYMBOLS = frozenset("+-*/")
DIGITS = frozenset("0123456789")
NUMBER_CHARS = DIGITS | {"."}
SEPARATOR = " "


class Lexer:
    """
    Single left-to-right scanner over an expression string.

    Rules:
        - Maximal runs of digits and "." become one NUMBER token
        - "+", "-", "*", "/", "(" and ")" each become one token
        - A plain space is tolerated only between two tokens; leading or trailing
          spaces, tabs and newlines are invalid characters
        - A number holds at most one "." and at least one digit
    """

    def __init__(self, expr: str):
        self.expr = expr
        self.pos = 0

    def tokenize(self) -> List[Token]:
        """
        Scan the whole expression.

        :return: Ordered list of tokens
        :rtype: List[Token]
        :raises LexError: On the first invalid character or malformed number
        """
        tokens: List[Token] = []
        length = len(self.expr)

        while self.pos < length:
            char = self.expr[self.pos]

            if char in NUMBER_CHARS:
                tokens.append(self._read_number())
            elif char in OPERATOR_SYMBOLS:
                tokens.append(Token(TokenKind.OPERATOR, char, self.pos))
                self.pos += 1
            elif char == "(":
                tokens.append(Token(TokenKind.LEFT_PAREN, position=self.pos))
                self.pos += 1
            elif char == ")":
                tokens.append(Token(TokenKind.RIGHT_PAREN, position=self.pos))
                self.pos += 1
            elif char == SEPARATOR:
                self._skip_separator(has_previous=bool(tokens))
            else:
                raise LexError("invalid character", self.pos)

        return tokens

    def _skip_separator(self, has_previous: bool) -> None:
        """Consume a run of spaces that must sit between two tokens."""
        start = self.pos
        while self.pos < len(self.expr) and self.expr[self.pos] == SEPARATOR:
            self.pos += 1
        # Leading run: the first space is the offending character
        if not has_previous:
            raise LexError("invalid character", start)
        # Trailing run: nothing follows the spaces
        if self.pos == len(self.expr):
            raise LexError("invalid character", start)

    def _read_number(self) -> Token:
        """Consume a maximal run of digits and decimal points."""
        start = self.pos
        while self.pos < len(self.expr) and self.expr[self.pos] in NUMBER_CHARS:
            self.pos += 1
        text = self.expr[start:self.pos]

        if text.count(".") > 1 or not any(c in DIGITS for c in text):
            raise LexError("malformed number", start)

        return Token(TokenKind.NUMBER, float(text), start)


def tokenize(expr: str) -> List[Token]:
    """
    Convert raw expression text into tokens.

    :param str expr: Arithmetic expression as a string

    :return: List of tokens
    :rtype: List[Token]
    :raises LexError: If the text contains a disallowed character or a malformed number
    """
    return Lexer(expr).tokenize()
