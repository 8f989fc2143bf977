"""Test class BatchEvaluator."""
from multiprocessing import Pipe
from pathlib import Path

from pydantic import ValidationError
import pytest

from shunting_yard.batch.evaluator import BatchEvaluator
from shunting_yard.common.models import OperationResult


class FinishedProcess:
    """Stand-in for a worker process that has already exited."""

    def __init__(self, exitcode: int = 0):
        self.exitcode = exitcode
        self.joined = False

    def is_alive(self) -> bool:
        return False

    def join(self) -> None:
        self.joined = True


class RunningProcess(FinishedProcess):
    """Stand-in for a worker process still computing."""

    def is_alive(self) -> bool:
        return True


@pytest.fixture
def input_file(tmp_path: Path) -> Path:
    """Create an input file mixing valid and invalid expressions."""
    path = tmp_path / "ops.txt"
    path.write_text("2 + 3\n\n2^3^2\n(1 + 2\n-3 + 4\nlog(1)\n")
    return path


@pytest.fixture
def output_file(tmp_path: Path) -> Path:
    """Create a temporary output file path."""
    return tmp_path / "results.txt"


def test_evaluator_requires_existing_input(tmp_path: Path, output_file: Path) -> None:
    """The input file must exist."""
    with pytest.raises(ValidationError):
        BatchEvaluator(input_file=tmp_path / "missing.txt", output_file=output_file)


def test_evaluator_rejects_zero_workers(input_file: Path, output_file: Path) -> None:
    with pytest.raises(ValidationError):
        BatchEvaluator(input_file=input_file, output_file=output_file, max_workers=0)


def test_collect_finished_workers_writes_results(input_file: Path, output_file: Path) -> None:
    """_collect_finished_workers writes results or errors to file."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=output_file)

    parent_conn, child_conn = Pipe()
    # simulate worker payload
    child_conn.send(OperationResult(line=1, expression="2 + 3", postfix="2 3 +", result=5.0).model_dump())
    child_conn.close()

    proc = FinishedProcess()
    active_workers = [(proc, parent_conn, 1, "2 + 3")]
    results = []

    with output_file.open("w") as f_out:
        evaluator._collect_finished_workers(active_workers, f_out, results)

    assert active_workers == []
    assert proc.joined
    assert [outcome.result for outcome in results] == [5.0]
    assert output_file.read_text() == "2 + 3 = 5.0\n"


def test_collect_finished_workers_handles_silent_worker(input_file: Path, output_file: Path) -> None:
    """A worker that died without a payload yields an error line."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=output_file)

    parent_conn, child_conn = Pipe()
    child_conn.close()

    active_workers = [(FinishedProcess(exitcode=1), parent_conn, 4, "1 + 1")]
    results = []

    with output_file.open("w") as f_out:
        evaluator._collect_finished_workers(active_workers, f_out, results)

    assert results[0].line == 4
    assert not results[0].ok
    assert "1 + 1 -> ERROR: worker exited with code 1" in output_file.read_text()


def test_collect_finished_workers_keeps_running_workers(input_file: Path, output_file: Path) -> None:
    """Workers that have not sent anything stay in the active list once the wait times out."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=output_file)
    parent_conn, _ = Pipe()
    active_workers = [(RunningProcess(), parent_conn, 1, "1")]

    with output_file.open("w") as f_out:
        evaluator._collect_finished_workers(active_workers, f_out, [], timeout=0.1)

    assert len(active_workers) == 1
    parent_conn.close()


@pytest.mark.parametrize("mode", ["two-pass", "fused"])
def test_run_evaluates_every_line(input_file: Path, output_file: Path, mode: str) -> None:
    """Run spawns workers and writes one line per expression."""
    evaluator = BatchEvaluator(input_file=input_file, output_file=output_file, mode=mode, max_workers=2)
    results = evaluator.run()

    assert [outcome.line for outcome in results] == [1, 3, 4, 5, 6]
    assert [outcome.result for outcome in results] == [5.0, 512.0, None, 1.0, None]
    assert results[2].error == "mismatched parentheses"

    content = output_file.read_text().splitlines()
    assert sorted(content) == sorted([
        "2 + 3 = 5.0",
        "2^3^2 = 512.0",
        "(1 + 2 -> ERROR: mismatched parentheses",
        "-3 + 4 = 1.0",
        "log(1) -> ERROR: invalid expression: unknown function 'log'",
    ])


def test_run_empty_input(tmp_path: Path, output_file: Path) -> None:
    """An input without expressions produces an empty output file."""
    empty = tmp_path / "empty.txt"
    empty.write_text("\n  \n")

    assert BatchEvaluator(input_file=empty, output_file=output_file).run() == []
    assert output_file.read_text() == ""


def test_run_collects_payload_larger_than_pipe_buffer(tmp_path: Path, output_file: Path) -> None:
    """A result bigger than the pipe buffer is received instead of blocking its worker."""
    expression = "+".join(["1"] * 40000)
    path = tmp_path / "long.txt"
    path.write_text(f"{expression}\n")

    results = BatchEvaluator(input_file=path, output_file=output_file, max_workers=1).run()

    assert len(results) == 1
    assert results[0].result == 40000.0
    assert len(results[0].postfix) > 64 * 1024
    assert output_file.read_text().endswith(" = 40000.0\n")
