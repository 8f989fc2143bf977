"""Worker process for evaluating a single arithmetic expression."""
from multiprocessing.connection import Connection
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shunting_yard.common.exceptions import ExpressionError
from shunting_yard.common.lexer import Token
from shunting_yard.common.logger import logger
from shunting_yard.common.models import OperationResult
from shunting_yard.common.parser import EvaluationMode, ExpressionParser


class WorkerProcess(BaseModel):
    """
    Worker process responsible for evaluating a single arithmetic expression.

    Lifecycle:
        - Spawned by the batch evaluator
        - Receives one expression only
        - Sends an OperationResult payload (result or error) through a Pipe
        - Terminates immediately after computation
    """

    # Make the Pydantic instance immutable (read-only) for safety
    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    conn: Connection = Field(..., description="Connection object for sending results back to the evaluator")
    expression: str = Field(..., description="Single arithmetic expression to evaluate")
    line_number: int = Field(..., ge=1, description="Line number in the input file")
    mode: EvaluationMode = Field(default=EvaluationMode.TWO_PASS, description="Evaluation strategy")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v

    def evaluate(self) -> OperationResult:
        """
        Evaluate the expression, turning expression errors into an error result.

        :return: Result carrying either the value and postfix form, or the error message
        :rtype: OperationResult
        """
        try:
            rpn: List[Token] = ExpressionParser.to_rpn(ExpressionParser.tokenize(self.expression))
            postfix: str = ExpressionParser.render(rpn)
            if self.mode is EvaluationMode.FUSED:
                result: float = ExpressionParser.evaluate_fused(self.expression)
            else:
                result = ExpressionParser.evaluate_rpn(rpn)
        except ExpressionError as exc:
            logger.error(
                f"👷❌ Worker failed on line {self.line_number}: {exc}\n"
                f"Invalid arithmetic expression, could not evaluate: {self.expression!r}"
            )
            return OperationResult(line=self.line_number, expression=self.expression, error=str(exc))

        return OperationResult(
            line=self.line_number,
            expression=self.expression,
            postfix=postfix,
            result=result,
        )

    def run(self) -> None:
        """
        Evaluate the arithmetic expression and send the result or error through the pipe.

        :return: None
        """
        logger.info(f"👷🏁 Worker started on line {self.line_number}: {self.expression}")

        outcome: Optional[OperationResult] = None
        try:
            outcome = self.evaluate()
            self.conn.send(outcome.model_dump())
        finally:
            # Always close the connection
            self.conn.close()

        if outcome.ok:
            logger.info(f"👷✅ Worker finished on line {self.line_number}: {outcome.result}")
