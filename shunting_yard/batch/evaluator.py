"""Evaluate a file of arithmetic expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
from typing import List, Optional, TextIO, Tuple

from pydantic import BaseModel, ConfigDict, Field, FilePath

from shunting_yard.batch.reader import read_expressions
from shunting_yard.batch.worker import WorkerProcess
from shunting_yard.common.logger import logger
from shunting_yard.common.models import OperationResult
from shunting_yard.common.parser import EvaluationMode

ActiveWorker = Tuple[Process, Connection, int, str]


class BatchEvaluator(BaseModel):
    """
    Evaluate every expression of an input file and write one result line per expression.

    Features:
        - Spawns one worker process per expression.
        - Writes results immediately to disk as soon as a worker finishes.
        - Ensures each worker is destroyed immediately after finishing.
        - Handles multiple simultaneous workers up to CPU core count.
    """

    model_config = ConfigDict(frozen=True)

    input_file: FilePath = Field(..., description="File or archive containing one expression per line")
    output_file: Path = Field(..., description="Path to write computation results")
    mode: EvaluationMode = Field(default=EvaluationMode.TWO_PASS, description="Evaluation strategy")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Worker limit, CPU count if unset")

    def _spawn_worker(self, expr: str, line_number: int) -> ActiveWorker:
        """
        Spawn a WorkerProcess for the given expression and return process and pipe.

        :param str expr: Arithmetic expression
        :param int line_number: Line number of expression in input

        :return: Tuple of (Process, parent_pipe, line_number, expression)
        :rtype: ActiveWorker
        """
        parent_conn, child_conn = Pipe()
        worker = WorkerProcess(conn=child_conn, expression=expr, line_number=line_number, mode=self.mode)
        process = Process(target=worker.run)
        process.start()
        # The child owns its end now
        child_conn.close()
        return process, parent_conn, line_number, expr

    def _collect_finished_workers(
        self,
        active_workers: List[ActiveWorker],
        f_out: TextIO,
        results: List[OperationResult],
        timeout: Optional[float] = None,
    ) -> None:
        """
        Collect results from workers whose pipe is ready and write them to the output file.

        Blocks until at least one pipe is readable or ``timeout`` expires.
        Payloads are received before joining, so a worker sending more than
        the pipe buffer holds is never left blocked.
        Finished workers are removed from the active_workers list.

        :param List[ActiveWorker] active_workers: Running workers
        :param TextIO f_out: Open file handle for writing results
        :param List[OperationResult] results: Collected results, appended in place
        :param Optional[float] timeout: Seconds to wait, forever if None
        """
        ready = wait([pipe_conn for _, pipe_conn, _, _ in active_workers], timeout=timeout)
        finished = [worker for worker in active_workers if worker[1] in ready]

        for proc, pipe_conn, line_number, expr in finished:
            try:
                outcome = OperationResult(**pipe_conn.recv())
            except EOFError:
                # Worker died before sending anything
                proc.join()
                logger.error(f"👷💥 Worker for line {line_number} exited with code {proc.exitcode}")
                outcome = OperationResult(
                    line=line_number, expression=expr, error=f"worker exited with code {proc.exitcode}"
                )
            finally:
                pipe_conn.close()
            proc.join()

            # Write output immediately
            f_out.write(f"{outcome.render()}\n")
            f_out.flush()
            results.append(outcome)

        active_workers[:] = [worker for worker in active_workers if worker[1] not in ready]

    def run(self) -> List[OperationResult]:
        """
        Evaluate all expressions of the input file.

        Steps:
            1. Read non-blank expression lines from the input file or archive.
            2. Spawn worker processes for each expression, respecting the worker limit.
            3. Write each result to the output file as soon as its worker finishes.

        :return: Results ordered by input line
        :rtype: List[OperationResult]
        """
        expressions: List[Tuple[int, str]] = read_expressions(self.input_file)
        logger.info(f"📥 Loaded {len(expressions)} expressions from {self.input_file}")

        results: List[OperationResult] = []
        with self.output_file.open("w", encoding="utf-8") as f_out:
            if not expressions:
                return results

            # Limit number of active workers to CPU cores or number of expressions
            max_workers: int = min(self.max_workers or cpu_count(), len(expressions))
            active_workers: List[ActiveWorker] = []

            for line_number, expr in expressions:
                # Wait until a worker slot is available
                while len(active_workers) >= max_workers:
                    self._collect_finished_workers(active_workers, f_out, results)

                active_workers.append(self._spawn_worker(expr, line_number))

            # Collect remaining active workers
            while active_workers:
                self._collect_finished_workers(active_workers, f_out, results)

        failed = sum(1 for outcome in results if not outcome.ok)
        logger.info(f"📝 Wrote {len(results)} results to {self.output_file} ({failed} failed)")
        return sorted(results, key=lambda outcome: outcome.line)
