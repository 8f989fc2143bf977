"""Split raw expression text into typed tokens."""
from enum import Enum
import math
import re
from typing import List, Optional, Pattern, Tuple

from pydantic import BaseModel, ConfigDict, Field

from shunting_yard.common.exceptions import EvaluationError, LexError


class TokenKind(str, Enum):
    """Closed set of token kinds produced by the lexer."""

    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    PARENTHESIS = "parenthesis"


class Token(BaseModel):
    """A single lexical token, keeping the exact text matched in the source."""

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="Kind of the token")
    text: str = Field(..., min_length=1, description="Exact substring matched in the input")
    position: int = Field(default=0, ge=0, description="Index of the first character in the input")

    @property
    def number(self) -> float:
        """
        Numeric value of a number token.

        :return: Parsed literal
        :rtype: float
        :raises ValueError: If the token is not a number
        :raises EvaluationError: If the literal is too large for a float
        """
        if self.kind is not TokenKind.NUMBER:
            raise ValueError(f"Token {self.text!r} is not a number")
        value = float(self.text)
        if not math.isfinite(value):
            raise EvaluationError(self.text, "numeric literal out of range")
        return value

    def __str__(self) -> str:
        return self.text


# ASCII digits only
NUMBER_PATTERN: Pattern[str] = re.compile(r"[0-9]*\.?[0-9]+")

# Order matters: numbers must be tried before operators.
# A None kind means the match is consumed without producing a token.
TOKEN_RULES: Tuple[Tuple[Pattern[str], Optional[TokenKind]], ...] = (
    (re.compile(r"\s+"), None),
    (NUMBER_PATTERN, TokenKind.NUMBER),
    (re.compile(r"[a-z]+"), TokenKind.IDENTIFIER),
    (re.compile(r"[+\-*/^]"), TokenKind.OPERATOR),
    (re.compile(r"[()]"), TokenKind.PARENTHESIS),
)


class Lexer:
    """
    Scan an expression left to right and produce tokens.

    Unary minus has no token of its own: a "-" is folded into the number
    literal that immediately follows it when it appears at the start of the
    input, after an operator, or after "(". Anywhere else it is the binary
    subtraction operator.

    Examples:
        - "-3+4"  -> [-3] [+] [4]
        - "5-3"   -> [5] [-] [3]
        - "2*-.5" -> [2] [*] [-.5]
    """

    @staticmethod
    def _starts_operand(previous: Optional[Token]) -> bool:
        """
        Whether the next token sits where an operand is expected.

        :param Optional[Token] previous: Last emitted token, None at the start of input

        :return: True if a "-" at this point is a sign rather than a subtraction
        :rtype: bool
        """
        return (
            previous is None
            or previous.kind is TokenKind.OPERATOR
            or previous.text == "("
        )

    @staticmethod
    def tokenize(expression: str, postfix: bool = False) -> List[Token]:
        """
        Split an expression into tokens.

        In postfix mode every "-" glued to a following number literal is a
        sign, since postfix text has no infix operands to subtract between.

        :param str expression: Expression text
        :param bool postfix: Tokenize postfix (RPN) text instead of infix text

        :return: Tokens in source order
        :rtype: List[Token]
        :raises LexError: If a character matches no token rule
        """
        tokens: List[Token] = []
        previous: Optional[Token] = None
        position = 0

        while position < len(expression):
            for pattern, kind in TOKEN_RULES:
                match = pattern.match(expression, position)
                if match:
                    break
            else:
                raise LexError(expression[position], position)

            text = match.group()
            if kind is None:
                position = match.end()
                continue

            if text == "-" and (postfix or Lexer._starts_operand(previous)):
                literal = NUMBER_PATTERN.match(expression, match.end())
                if literal:
                    text += literal.group()
                    kind = TokenKind.NUMBER

            previous = Token(kind=kind, text=text, position=position)
            tokens.append(previous)
            position += len(text)

        return tokens
