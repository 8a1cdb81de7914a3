"""Test the expression lexer."""
import pytest

from calculator_service.common.errors import LexError
from calculator_service.common.lexer import Token, TokenKind, tokenize


def test_tokenize_basic():
    """Tokenize splits a spaced expression into numbers and operators."""
    tokens = tokenize("3 + 4 * 2")
    assert [t.kind for t in tokens] == [
        TokenKind.NUMBER,
        TokenKind.OPERATOR,
        TokenKind.NUMBER,
        TokenKind.OPERATOR,
        TokenKind.NUMBER,
    ]
    assert [t.value for t in tokens] == [3.0, "+", 4.0, "*", 2.0]


def test_tokenize_without_spaces():
    """Parentheses and operators need no separators."""
    tokens = tokenize("(2+3)*(4-1)")
    assert [str(t) for t in tokens] == ["(", "2.0", "+", "3.0", ")", "*", "(", "4.0", "-", "1.0", ")"]


def test_tokenize_records_positions():
    """Each token remembers where it started in the source."""
    tokens = tokenize("12 + 3.5")
    assert [t.position for t in tokens] == [0, 3, 5]


@pytest.mark.parametrize("text,expected", [
    ("7", 7.0),
    ("45.67", 45.67),
    ("5.", 5.0),
    (".5", 0.5),
    ("007", 7.0),
])
def test_tokenize_numbers(text, expected):
    """Maximal digit runs with at most one decimal point become one NUMBER token."""
    assert tokenize(text) == [Token(TokenKind.NUMBER, expected, 0)]


def test_tokens_are_immutable():
    """Tokens cannot be modified once emitted."""
    token = tokenize("1")[0]
    with pytest.raises(AttributeError):
        token.value = 2.0


@pytest.mark.parametrize("expr,position", [
    ("2 + 3 * 4 ", 9),   # Trailing space
    (" 2 + 3", 0),       # Leading space
    ("2 +\t3", 3),       # Tab is not a separator
    ("2 + 3\n", 5),      # Newline
    ("2 ^ 3", 2),        # Exponent is not supported
    ("2 + x", 4),
    ("1,5", 1),          # No internationalized numbers
    ("   ", 0),
])
def test_tokenize_invalid_character(expr, position):
    """Characters outside the grammar and stray whitespace are rejected."""
    with pytest.raises(LexError) as exc_info:
        tokenize(expr)
    assert exc_info.value.reason == "invalid character"
    assert exc_info.value.position == position


@pytest.mark.parametrize("expr,position", [
    ("1.2.3", 0),
    (".", 0),
    ("2 + ..", 4),
])
def test_tokenize_malformed_number(expr, position):
    """Numbers with two decimal points or no digits are rejected."""
    with pytest.raises(LexError) as exc_info:
        tokenize(expr)
    assert exc_info.value.reason == "malformed number"
    assert exc_info.value.position == position


def test_tokenize_empty():
    """An empty string produces no tokens; the parser reports it."""
    assert tokenize("") == []


def test_lex_error_is_value_error():
    """Callers catching ValueError also catch lexical errors."""
    with pytest.raises(ValueError, match="invalid character at position 1"):
        tokenize("1a")
