"""
Split a script into GO-terminated batches and run them one by one.

Lines are joined with a single space and the buffer is trimmed after every
line. A batch is sent as soon as the trimmed buffer ends with the literal,
upper-case ``GO``; there is no tokenizing, so a ``GO`` at the end of a
comment or string literal also ends the batch. Whatever follows the last
``GO`` is never executed.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

from .connection import error_message, is_recoverable
from .console import ProgressReporter

DELIMITER = "GO"

COMPLETED = "completed"
CANCELLED = "cancelled"
FAILED = "failed"


@dataclass
class BatchResult:
    rows_affected: int = 0
    batches_executed: int = 0
    batches_failed: int = 0
    outcome: str = COMPLETED
    error: Optional[BaseException] = None


def execute_non_query(cursor, sql: str) -> int:
    """Run one batch and return the rows it affected, -1 if none were reported.

    A batch may hold several statements; positive counts from every result set
    are summed.
    """
    cursor.execute(sql)
    total = -1
    while True:
        count = cursor.rowcount
        if count is not None and count > 0:
            total = count if total < 0 else total + count
        if not cursor.nextset():
            break
    return total


class BatchExecutor:
    """Accumulate script lines and execute each GO-terminated batch.

    ``cancelled`` is polled before every line is read; ``on_error`` receives
    the message of every failed batch, recoverable or not.
    """

    def __init__(self, connection, progress: Optional[ProgressReporter] = None,
                 on_error: Optional[Callable[[str], None]] = None,
                 cancelled: Optional[Callable[[], bool]] = None) -> None:
        self.connection = connection
        self.progress = progress
        self.on_error = on_error or (lambda message: None)
        self.cancelled = cancelled or (lambda: False)
        self.pending = ""
        self.counter = 0

    def feed(self, line: str) -> Optional[str]:
        """Add a line to the pending batch; return the batch text once it is terminated."""
        self.pending = f"{self.pending} {line}".strip()
        if not self.pending.endswith(DELIMITER):
            return None
        batch = self.pending[:-len(DELIMITER)].rstrip()
        self.pending = ""
        return batch

    def run(self, lines: Iterable[str]) -> BatchResult:
        result = BatchResult()
        cursor = self.connection.cursor()
        it = iter(lines)
        try:
            while not self.cancelled():
                batch = None
                try:
                    line = next(it, None)
                    if line is None:
                        break
                    batch = self.feed(line.rstrip("\r\n"))
                    if not batch:
                        # not terminated yet, or a bare GO
                        continue
                    affected = execute_non_query(cursor, batch)
                except Exception as e:
                    self.pending = ""
                    self.on_error(error_message(e))
                    if batch:
                        result.batches_failed += 1
                    if batch and is_recoverable(e):
                        continue
                    result.outcome = FAILED
                    result.error = e
                    break
                result.batches_executed += 1
                if affected > 0:
                    self.counter += affected
                if self.counter > 0 and self.progress is not None:
                    self.progress.report(self.counter)
            else:
                result.outcome = CANCELLED
        finally:
            # The unterminated tail is dropped
            self.pending = ""
            try:
                cursor.close()
            except Exception:
                pass
            if self.progress is not None:
                self.progress.finish()
        result.rows_affected = self.counter
        return result
