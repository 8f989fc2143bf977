"""
Command-line entrypoint.

This script either:
- Evaluates a single infix expression given as argument, or
- Evaluates every expression of a file (or archive) given with --file,
  writing the results beside the input file.

Examples
--------
shunting-yard "2 + 3 * 4"            -> 14.0
shunting-yard --postfix "2 ^ 3 ^ 2"  -> 2 3 2 ^ ^
shunting-yard --file resources/operations.txt
"""

import argparse
from pathlib import Path
import sys
from typing import List, Literal, Optional

from pydantic import BaseModel, FilePath, ValidationError, model_validator

from shunting_yard.batch.evaluator import BatchEvaluator
from shunting_yard.common.exceptions import ExpressionError
from shunting_yard.common.logger import configure_logging, logger
from shunting_yard.common.models import OperationRequest
from shunting_yard.common.parser import EvaluationMode, ExpressionParser


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : Optional[str]
        Infix expression to evaluate.
    file_path : Optional[FilePath]
        Path to a file containing one expression per line.
    mode : EvaluationMode
        Evaluation strategy.
    postfix : bool
        Print the postfix rendering instead of the value.
    log_level : str
        Logging level name.
    """

    expression: Optional[str] = None
    file_path: Optional[FilePath] = None
    mode: EvaluationMode = EvaluationMode.TWO_PASS
    postfix: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"

    @model_validator(mode="after")
    def expression_xor_file(self) -> "CliArgs":
        """Exactly one input source must be given."""
        if (self.expression is None) == (self.file_path is None):
            raise ValueError("Provide exactly one of an expression or --file")
        return self


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :param Optional[List[str]] argv: Arguments, sys.argv[1:] if None

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="shunting-yard",
        description="Evaluate infix arithmetic expressions with the Shunting-yard algorithm",
    )

    parser.add_argument("expression", nargs="?", help="Infix expression, e.g. \"2 * (3 + 4)\"")
    parser.add_argument("-f", "--file", dest="file_path", help="File or archive with one expression per line")
    parser.add_argument(
        "-m",
        "--mode",
        choices=[mode.value for mode in EvaluationMode],
        default=EvaluationMode.TWO_PASS.value,
        help="Evaluation strategy",
    )
    parser.add_argument("-p", "--postfix", action="store_true", help="Print the postfix form instead of the value")
    parser.add_argument("--log-level", default="WARNING", type=str.upper, help="Logging level")

    args = parser.parse_args(argv)

    try:
        return CliArgs(**vars(args))
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Construct a safe output file path based on the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations.txt
    output: resources/operations_txt_results.txt

    input: resources/operations_short.tar.xz
    output: resources/operations_short_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function executed by the shunting-yard console script.

    :param Optional[List[str]] argv: Arguments, sys.argv[1:] if None

    :return: Process exit status
    :rtype: int
    """
    cli_args = parse_args(argv)
    configure_logging(cli_args.log_level)

    if cli_args.file_path is not None:
        input_path = Path(cli_args.file_path)
        output_path = build_output_path(input_path)
        try:
            results = BatchEvaluator(input_file=input_path, output_file=output_path, mode=cli_args.mode).run()
        except ValueError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        print(f"{len(results)} results written to {output_path}")
        return 0 if all(outcome.ok for outcome in results) else 1

    try:
        request = OperationRequest(expression=cli_args.expression, mode=cli_args.mode)
    except ValidationError:
        print("error: expression cannot be empty", file=sys.stderr)
        return 1

    try:
        if cli_args.postfix:
            print(ExpressionParser.to_postfix(request.expression))
        else:
            print(ExpressionParser.evaluate(request.expression, request.mode))
    except ExpressionError as exc:
        logger.debug(f"Rejected expression {request.expression!r}")
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
