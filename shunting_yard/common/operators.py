"""Read-only registry of binary operators and unary functions."""
from enum import Enum
import math
import operator
from types import MappingProxyType
from typing import Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from shunting_yard.common.exceptions import EvaluationError, UnknownFunctionError


# Type aliases for evaluation rules
BinaryFn = Callable[[float, float], float]
UnaryFn = Callable[[float], float]


class Associativity(str, Enum):
    """Grouping of repeated operators with equal precedence."""

    LEFT = "left"
    RIGHT = "right"


class OperatorSpec(BaseModel):
    """Precedence, associativity and evaluation rule of a binary operator."""

    model_config = ConfigDict(frozen=True)

    symbol: str = Field(..., min_length=1, max_length=1, description="Operator character")
    precedence: int = Field(..., ge=1, description="Binding strength, higher binds tighter")
    associativity: Associativity = Field(..., description="Grouping of equal-precedence chains")
    rule: BinaryFn = Field(..., description="Evaluation rule (left, right) -> value")


class FunctionSpec(BaseModel):
    """Name and evaluation rule of a unary function."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., pattern=r"^[a-z]+$", description="Lowercase function name")
    rule: UnaryFn = Field(..., description="Evaluation rule (value) -> value")


OPERATORS: Mapping[str, OperatorSpec] = MappingProxyType({
    "^": OperatorSpec(symbol="^", precedence=4, associativity=Associativity.RIGHT, rule=math.pow),
    "*": OperatorSpec(symbol="*", precedence=3, associativity=Associativity.LEFT, rule=operator.mul),
    "/": OperatorSpec(symbol="/", precedence=3, associativity=Associativity.LEFT, rule=operator.truediv),
    "+": OperatorSpec(symbol="+", precedence=2, associativity=Associativity.LEFT, rule=operator.add),
    "-": OperatorSpec(symbol="-", precedence=2, associativity=Associativity.LEFT, rule=operator.sub),
})

FUNCTIONS: Mapping[str, FunctionSpec] = MappingProxyType({
    "neg": FunctionSpec(name="neg", rule=operator.neg),
    "sin": FunctionSpec(name="sin", rule=math.sin),
    "cos": FunctionSpec(name="cos", rule=math.cos),
    "tan": FunctionSpec(name="tan", rule=math.tan),
})


def is_operator(symbol: str) -> bool:
    """Return True if ``symbol`` is a registered binary operator."""
    return symbol in OPERATORS


def is_function(name: str) -> bool:
    """Return True if ``name`` is a registered function, ignoring case."""
    return name.lower() in FUNCTIONS


def precedence_of(symbol: str) -> int:
    """Return the precedence of an operator; raises KeyError for unknown symbols."""
    return OPERATORS[symbol].precedence


def associativity_of(symbol: str) -> Associativity:
    """Return the associativity of an operator; raises KeyError for unknown symbols."""
    return OPERATORS[symbol].associativity


def evaluate_binary(symbol: str, left: float, right: float) -> float:
    """
    Apply a binary operator.

    :param str symbol: Operator symbol
    :param float left: Left operand
    :param float right: Right operand

    :return: Result of ``left <symbol> right``
    :rtype: float
    :raises KeyError: If the symbol is not an operator
    :raises EvaluationError: If the arithmetic fails or overflows
    """
    rule = OPERATORS[symbol].rule
    try:
        result = rule(left, right)
    except ZeroDivisionError:
        raise EvaluationError(symbol, "division by zero") from None
    except (ArithmeticError, ValueError) as exc:
        raise EvaluationError(symbol, str(exc)) from exc
    if not math.isfinite(result) and math.isfinite(left) and math.isfinite(right):
        raise EvaluationError(symbol, "numerical result out of range")
    return result


def evaluate_unary_function(name: str, value: float) -> float:
    """
    Apply a unary function.

    :param str name: Function name, case-insensitive
    :param float value: Argument

    :return: Function result
    :rtype: float
    :raises UnknownFunctionError: If the name is not registered
    :raises EvaluationError: If the function is undefined for the argument
    """
    spec = FUNCTIONS.get(name.lower())
    if spec is None:
        raise UnknownFunctionError(name)
    try:
        result = spec.rule(value)
    except (ArithmeticError, ValueError) as exc:
        raise EvaluationError(name, str(exc)) from exc
    if not math.isfinite(result) and math.isfinite(value):
        raise EvaluationError(name, "numerical result out of range")
    return result
