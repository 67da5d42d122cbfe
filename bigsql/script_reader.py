from __future__ import annotations

import os
from typing import IO, Iterator, Optional


class ScriptNotFoundError(FileNotFoundError):
    pass


class ScriptReader:
    """Forward-only line access to an open script file."""

    def __init__(self, path: str, stream: IO[str]) -> None:
        self.path = path
        self._stream: Optional[IO[str]] = stream

    def __iter__(self) -> Iterator[str]:
        return self

    def __next__(self) -> str:
        line = self.read_line()
        if line is None:
            raise StopIteration
        return line

    def read_line(self) -> Optional[str]:
        """Next line without its terminator, or None at end of stream."""
        if self._stream is None:
            return None
        line = self._stream.readline()
        if not line:
            return None
        return line.rstrip("\r\n")

    def close(self) -> None:
        if self._stream is not None:
            self._stream.close()
            self._stream = None

    def __enter__(self) -> "ScriptReader":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def open_script(path: str, encoding: str = "utf-8-sig") -> ScriptReader:
    if not path or not os.path.isfile(path):
        raise ScriptNotFoundError(f"The big sql script file path '{path}' hasn't existed in your hard drive")
    f = open(path, "r", encoding=encoding)
    return ScriptReader(path, f)
