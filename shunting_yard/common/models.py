"""Pydantic models for expression evaluation requests and results."""
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from shunting_yard.common.parser import EvaluationMode


class OperationRequest(BaseModel):
    """Represents a single arithmetic expression to evaluate."""

    expression: str = Field(..., description="Infix arithmetic expression as a string")
    mode: EvaluationMode = Field(default=EvaluationMode.TWO_PASS, description="Evaluation strategy")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not blank."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v


class OperationResult(BaseModel):
    """Represents the outcome of an evaluated arithmetic expression: a result or an error."""

    line: int = Field(default=1, ge=1, description="Line number of the expression in its source")
    expression: str = Field(..., description="Original arithmetic expression")
    postfix: Optional[str] = Field(default=None, description="Postfix rendering of the expression")
    result: Optional[float] = Field(default=None, description="Evaluated numeric result of the expression")
    error: Optional[str] = Field(default=None, description="Error message if evaluation failed")

    @model_validator(mode="after")
    def result_xor_error(self) -> "OperationResult":
        """Exactly one of result and error must be set."""
        if (self.result is None) == (self.error is None):
            raise ValueError("Exactly one of 'result' or 'error' must be set")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None

    def render(self) -> str:
        """
        Format the result as one output line.

        :return: "<expression> = <result>" or "<expression> -> ERROR: <message>"
        :rtype: str
        """
        if self.ok:
            return f"{self.expression} = {self.result}"
        return f"{self.expression} -> ERROR: {self.error}"
