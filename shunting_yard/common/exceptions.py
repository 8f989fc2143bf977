"""Errors raised while tokenizing, converting or evaluating an expression."""


class ExpressionError(ValueError):
    """Base class for every error caused by an invalid input expression."""


class LexError(ExpressionError):
    """
    Raised when no token rule matches the input at some position.

    :param str character: Offending character
    :param int position: Zero-based index of the character in the input
    """

    def __init__(self, character: str, position: int) -> None:
        self.character = character
        self.position = position
        super().__init__(f"Unexpected character {character!r} at position {position}")


class ExpressionSyntaxError(ExpressionError):
    """Raised when the token sequence does not form a valid expression."""


class MismatchedParenthesesError(ExpressionSyntaxError):
    """Raised on a closing parenthesis without an opening one, or an unclosed one."""

    def __init__(self, message: str = "mismatched parentheses") -> None:
        super().__init__(message)


class InvalidExpressionError(ExpressionSyntaxError):
    """Raised when operands and operators do not reduce to exactly one value."""

    def __init__(self, message: str = "invalid expression") -> None:
        super().__init__(message)


class UnknownFunctionError(InvalidExpressionError):
    """Raised when an identifier does not name a registered function."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"invalid expression: unknown function {name!r}")


class EvaluationError(ExpressionError):
    """Raised when an operator or function rule fails (division by zero, domain error, overflow)."""

    def __init__(self, symbol: str, reason: str) -> None:
        self.symbol = symbol
        super().__init__(f"cannot evaluate {symbol!r}: {reason}")
