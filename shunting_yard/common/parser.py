"""Convert and evaluate infix arithmetic expressions with the Shunting-yard algorithm."""
from enum import Enum
from typing import Iterable, Iterator, List, Optional

from shunting_yard.common.exceptions import (
    ExpressionError,
    InvalidExpressionError,
    MismatchedParenthesesError,
    UnknownFunctionError,
)
from shunting_yard.common.lexer import Lexer, Token, TokenKind
from shunting_yard.common.operators import (
    Associativity,
    associativity_of,
    evaluate_binary,
    evaluate_unary_function,
    is_function,
    precedence_of,
)


class EvaluationMode(str, Enum):
    """Strategy used to evaluate an infix expression."""

    # Convert to postfix, then evaluate the postfix sequence
    TWO_PASS = "two-pass"
    # Resolve operators against the value stack while converting
    FUSED = "fused"


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Safe, deterministic computation
        - No state shared between calls: every stack lives inside one call

    Algorithm:
        1. Tokenize with the Lexer
        2. Convert to Reverse Polish Notation (RPN) using Shunting-yard
        3. Evaluate RPN using a stack

    The Shunting-yard algorithm converts an infix expression into Reverse Polish Notation (RPN), allowing safe, stack-based evaluation without parentheses.
    It handles operator precedence and associativity by temporarily storing operators on a stack and outputting them in the correct order.
    The fused evaluator skips step 2's output list and resolves every operator as soon as it leaves the stack.

    Examples:
        - Infix expression (standard notation): 3 + 4 * 2
        - Corresponding Reverse Polish Notation (RPN): 3 4 2 * +
        - Right-associative power: 2 ^ 3 ^ 2 -> 2 3 2 ^ ^
        - Function call: 2 * neg(3) -> 2 3 neg *
    """

    @staticmethod
    def tokenize(expr: str) -> List[Token]:
        """
        Split an infix arithmetic expression into tokens.

        :param str expr: Arithmetic expression as a string

        :return: List of tokens
        :rtype: List[Token]
        :raises LexError: If a character matches no token rule
        """
        return Lexer.tokenize(expr)

    @staticmethod
    def _pops_before(top: Token, incoming: Token) -> bool:
        """
        Decide whether the stack top must be output before pushing an operator.

        Functions bind tighter than any operator. Between operators, the top
        leaves first when it binds tighter, or binds equally and the incoming
        operator is left-associative.

        :param Token top: Entry on top of the operator stack
        :param Token incoming: Operator token being pushed

        :return: True if ``top`` must be popped first
        :rtype: bool
        """
        if top.text == "(":
            return False
        if top.kind is TokenKind.IDENTIFIER:
            return True
        top_prec: int = precedence_of(top.text)
        prec: int = precedence_of(incoming.text)
        return top_prec > prec or (
            top_prec == prec and associativity_of(incoming.text) is Associativity.LEFT
        )

    @staticmethod
    def _shunt(tokens: Iterable[Token]) -> Iterator[Token]:
        """
        Yield tokens in postfix order as the Shunting-yard loop releases them.

        :param Iterable[Token] tokens: Infix tokens

        :return: Iterator over numbers, operators and function names in RPN order
        :rtype: Iterator[Token]
        :raises MismatchedParenthesesError: When a parenthesis has no counterpart
        """
        stack: List[Token] = []

        for token in tokens:
            if token.kind is TokenKind.NUMBER:
                # Numbers are added directly to the output
                yield token
            elif token.kind is TokenKind.IDENTIFIER:
                # Function waits until its argument has been output
                stack.append(token)
            elif token.kind is TokenKind.OPERATOR:
                while stack and ExpressionParser._pops_before(stack[-1], token):
                    yield stack.pop()
                stack.append(token)
            elif token.text == "(":
                stack.append(token)
            else:
                while stack and stack[-1].text != "(":
                    yield stack.pop()
                if not stack:
                    raise MismatchedParenthesesError()
                stack.pop()
                if stack and stack[-1].kind is TokenKind.IDENTIFIER:
                    yield stack.pop()

        # Flush remaining entries, stack top first
        while stack:
            top = stack.pop()
            if top.text == "(":
                raise MismatchedParenthesesError()
            yield top

    @staticmethod
    def to_rpn(tokens: Iterable[Token]) -> List[Token]:
        """
        Convert a list of tokens into Reverse Polish Notation (RPN) using the Shunting-yard algorithm.

        :param Iterable[Token] tokens: List of arithmetic tokens

        :return: List of tokens in RPN order
        :rtype: List[Token]
        :raises MismatchedParenthesesError: When a parenthesis has no counterpart
        """
        return list(ExpressionParser._shunt(tokens))

    @staticmethod
    def to_postfix(expr: str) -> str:
        """
        Render an infix expression in postfix notation.

        :param str expr: Infix arithmetic expression

        :return: Space-separated postfix tokens, e.g. "3 4 2 * +"
        :rtype: str
        """
        return ExpressionParser.render(ExpressionParser.to_rpn(ExpressionParser.tokenize(expr)))

    @staticmethod
    def render(tokens: Iterable[Token]) -> str:
        """Join token texts with single spaces."""
        return " ".join(token.text for token in tokens)

    @staticmethod
    def _apply(token: Token, stack: List[float]) -> None:
        """
        Push a number, or resolve a function or operator against the value stack.

        :param Token token: Postfix token
        :param List[float] stack: Values computed so far, modified in place
        :raises InvalidExpressionError: On missing operands or a stray parenthesis
        :raises UnknownFunctionError: If a function name is not registered
        :raises EvaluationError: If the arithmetic fails
        """
        if token.kind is TokenKind.NUMBER:
            stack.append(token.number)
        elif token.kind is TokenKind.IDENTIFIER:
            if not is_function(token.text):
                raise UnknownFunctionError(token.text)
            if not stack:
                raise InvalidExpressionError()
            stack.append(evaluate_unary_function(token.text, stack.pop()))
        elif token.kind is TokenKind.OPERATOR:
            # Operator requires two operands
            if len(stack) < 2:
                raise InvalidExpressionError()
            b: float = stack.pop()
            a: float = stack.pop()
            stack.append(evaluate_binary(token.text, a, b))
        else:
            raise InvalidExpressionError()

    @staticmethod
    def _single_value(stack: List[float]) -> float:
        if len(stack) != 1:
            raise InvalidExpressionError()
        return stack[0]

    @staticmethod
    def evaluate_rpn(tokens: Iterable[Token]) -> float:
        """
        Evaluate tokens already in Reverse Polish Notation.

        :param Iterable[Token] tokens: Postfix tokens

        :return: Computed result as float
        :rtype: float
        :raises InvalidExpressionError: If the tokens do not reduce to exactly one value
        """
        stack: List[float] = []
        for token in tokens:
            ExpressionParser._apply(token, stack)
        return ExpressionParser._single_value(stack)

    @staticmethod
    def evaluate_postfix(expr: str) -> float:
        """
        Evaluate a postfix expression such as "3 4 2 * +".

        :param str expr: Postfix arithmetic expression

        :return: Computed result as float
        :rtype: float
        """
        return ExpressionParser.evaluate_rpn(Lexer.tokenize(expr, postfix=True))

    @staticmethod
    def evaluate_infix(expr: str) -> float:
        """
        Evaluate an infix expression: convert it to RPN, then evaluate the RPN.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises ExpressionError: If the expression is invalid or malformed
        """
        return ExpressionParser.evaluate_rpn(ExpressionParser.to_rpn(ExpressionParser.tokenize(expr)))

    @staticmethod
    def evaluate_fused(expr: str) -> float:
        """
        Evaluate an infix expression in a single pass without building the RPN list.

        Parenthesis errors are raised where the scan detects them. The first
        evaluation failure is held until the scan ends, so that every input
        fails exactly as it would through ``evaluate_infix``.

        :param str expr: Arithmetic expression string

        :return: Computed result as float
        :rtype: float
        :raises ExpressionError: If the expression is invalid or malformed
        """
        stack: List[float] = []
        failure: Optional[ExpressionError] = None

        for token in ExpressionParser._shunt(ExpressionParser.tokenize(expr)):
            if failure is not None:
                continue
            try:
                ExpressionParser._apply(token, stack)
            except ExpressionError as exc:
                failure = exc

        if failure is not None:
            raise failure
        return ExpressionParser._single_value(stack)

    @staticmethod
    def evaluate(expr: str, mode: EvaluationMode = EvaluationMode.TWO_PASS) -> float:
        """
        Evaluate an infix arithmetic expression with the selected strategy.

        :param str expr: Arithmetic expression string
        :param EvaluationMode mode: Two-pass (reference) or fused evaluation

        :return: Computed result as float
        :rtype: float
        :raises ExpressionError: If the expression is invalid or malformed
        """
        if EvaluationMode(mode) is EvaluationMode.FUSED:
            return ExpressionParser.evaluate_fused(expr)
        return ExpressionParser.evaluate_infix(expr)
