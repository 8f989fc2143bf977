"""Test class Lexer."""
from pydantic import ValidationError
import pytest

from shunting_yard.common.exceptions import EvaluationError, LexError
from shunting_yard.common.lexer import Lexer, Token, TokenKind


def _pairs(tokens):
    return [(token.kind, token.text) for token in tokens]


def test_tokenize_basic():
    """Tokenize splits a simple expression into typed tokens."""
    tokens = Lexer.tokenize("3 + 4 * 2")
    assert _pairs(tokens) == [
        (TokenKind.NUMBER, "3"),
        (TokenKind.OPERATOR, "+"),
        (TokenKind.NUMBER, "4"),
        (TokenKind.OPERATOR, "*"),
        (TokenKind.NUMBER, "2"),
    ]


def test_tokenize_without_whitespace():
    """Whitespace is optional between tokens."""
    assert [t.text for t in Lexer.tokenize("(12.5+.5)^2")] == ["(", "12.5", "+", ".5", ")", "^", "2"]


def test_tokenize_function_call():
    """Lowercase words become identifiers."""
    tokens = Lexer.tokenize("sin(x)")
    assert _pairs(tokens) == [
        (TokenKind.IDENTIFIER, "sin"),
        (TokenKind.PARENTHESIS, "("),
        (TokenKind.IDENTIFIER, "x"),
        (TokenKind.PARENTHESIS, ")"),
    ]


def test_unary_minus_at_start_is_folded():
    """A leading minus becomes part of the number literal."""
    assert _pairs(Lexer.tokenize("-3+4")) == [
        (TokenKind.NUMBER, "-3"),
        (TokenKind.OPERATOR, "+"),
        (TokenKind.NUMBER, "4"),
    ]


@pytest.mark.parametrize("expr,expected", [
    ("5-3", ["5", "-", "3"]),
    ("2*-3.5", ["2", "*", "-3.5"]),
    ("(-2)", ["(", "-2", ")"]),
    ("2--3", ["2", "-", "-3"]),
    ("1^-.5", ["1", "^", "-.5"]),
    (")-1", [")", "-", "1"]),
    ("sin-1", ["sin", "-", "1"]),
])
def test_unary_minus_context(expr, expected):
    """Minus is folded only at the start, after an operator, or after '('."""
    assert [t.text for t in Lexer.tokenize(expr)] == expected


@pytest.mark.parametrize("expr", ["- 3", "-(3)", "-x"])
def test_minus_without_adjacent_number_stays_operator(expr):
    """A sign position without a literal right after it keeps a plain operator."""
    first = Lexer.tokenize(expr)[0]
    assert first.kind is TokenKind.OPERATOR
    assert first.text == "-"


def test_postfix_mode_folds_minus_before_number():
    """In postfix text a minus glued to a number is always a sign."""
    assert [t.text for t in Lexer.tokenize("2 -3 +", postfix=True)] == ["2", "-3", "+"]
    assert [t.text for t in Lexer.tokenize("2 -3 +")] == ["2", "-", "3", "+"]
    assert [t.text for t in Lexer.tokenize("2 3 -", postfix=True)] == ["2", "3", "-"]


def test_lex_error_reports_character_and_position():
    """An illegal character aborts the scan with its position."""
    with pytest.raises(LexError) as excinfo:
        Lexer.tokenize("2+#3")
    assert excinfo.value.character == "#"
    assert excinfo.value.position == 2
    assert "#" in str(excinfo.value)


@pytest.mark.parametrize("expr,char,position", [
    ("3.", ".", 1),
    ("SIN(0)", "S", 0),
    ("1 , 2", ",", 2),
    ("4 % 2", "%", 2),
])
def test_lex_error_on_illegal_input(expr, char, position):
    """Characters outside the grammar are rejected."""
    with pytest.raises(LexError) as excinfo:
        Lexer.tokenize(expr)
    assert (excinfo.value.character, excinfo.value.position) == (char, position)


def test_lex_error_is_value_error():
    """Callers catching ValueError also catch lexical errors."""
    with pytest.raises(ValueError):
        Lexer.tokenize("2 $ 2")


@pytest.mark.parametrize("expr", ["", "   ", "\t\n"])
def test_tokenize_empty_input(expr):
    """Empty or blank input produces no tokens."""
    assert Lexer.tokenize(expr) == []


@pytest.mark.parametrize("expr", ["  -1.5 * ( 2 + tan(3) ) ", "2^3^2", "neg(4)-  -4"])
def test_tokens_cover_input(expr):
    """Token spans plus skipped whitespace cover the input without gaps or overlaps."""
    tokens = Lexer.tokenize(expr)
    covered = 0
    for token in tokens:
        assert expr[covered:token.position].strip() == ""
        assert expr[token.position:token.position + len(token.text)] == token.text
        covered = token.position + len(token.text)
    assert expr[covered:].strip() == ""


def test_token_is_immutable():
    """Tokens are frozen values."""
    token = Token(kind=TokenKind.NUMBER, text="1")
    with pytest.raises(ValidationError):
        token.text = "2"


def test_token_number():
    """Number tokens parse their literal text; other kinds refuse."""
    assert Token(kind=TokenKind.NUMBER, text="-.25").number == -0.25
    with pytest.raises(ValueError):
        Token(kind=TokenKind.OPERATOR, text="+").number


@pytest.mark.parametrize("expr,char,position", [
    ("٣+1", "٣", 0),     # Arabic-Indic digit three
    ("1+２", "２", 2),     # fullwidth digit two
    ("-१", "१", 1),     # Devanagari digit one after a sign
])
def test_lex_error_on_non_ascii_digits(expr, char, position):
    """Only ASCII digits form number literals."""
    with pytest.raises(LexError) as excinfo:
        Lexer.tokenize(expr)
    assert (excinfo.value.character, excinfo.value.position) == (char, position)


def test_token_number_out_of_range():
    """A literal too long for a float is an evaluation error."""
    with pytest.raises(EvaluationError):
        Token(kind=TokenKind.NUMBER, text="9" * 400).number
