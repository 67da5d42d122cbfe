"""
Optional per-run log file: session header, batch errors and the final summary.

Log layout (one session per file, the file is truncated on open):

    *************** [2026-10-19 10:00:00]****************
    Running C:\\scripts\\big.sql...
    <error message>
    ...
    Completed
    Total 42 rows added to database
"""
from __future__ import annotations

import os
from datetime import datetime
from typing import IO, Optional

LOG_EXTENSIONS = (".txt", ".log")


def validate_log_path(path: Optional[str]) -> str:
    path = (path or "").strip()
    if not path or not path.lower().endswith(LOG_EXTENSIONS):
        raise ValueError("Please enter valid file path and has extension .txt or .log")
    return path


class RunLog:
    def __init__(self, path: str, stream: IO[str]) -> None:
        self.path = path
        self._stream: Optional[IO[str]] = stream

    @classmethod
    def open(cls, path: str, script_path: str, now: Optional[datetime] = None) -> "RunLog":
        path = validate_log_path(path)
        parent = os.path.dirname(os.path.abspath(path))
        if not os.path.isdir(parent):
            raise FileNotFoundError(f"Could not find a part of the path '{path}'")
        log = cls(path, open(path, "w", encoding="utf-8"))
        stamp = (now or datetime.now()).strftime("%Y-%m-%d %H:%M:%S")
        log.write(f"*************** [{stamp}]****************")
        log.write(f"Running {script_path}...")
        return log

    @property
    def closed(self) -> bool:
        return self._stream is None

    def write(self, line: str) -> None:
        if self._stream is None:
            return
        self._stream.write(line + "\n")
        self._stream.flush()

    def error(self, message: str) -> None:
        self.write(message)

    def completed(self, total: int) -> None:
        self.write("Completed")
        self.write(f"Total {total} rows added to database")

    def close(self) -> None:
        if self._stream is not None:
            try:
                self._stream.close()
            finally:
                self._stream = None
