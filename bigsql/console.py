"""
Console helpers: in-place progress line, stopwatch, key polling and the exit-key wait.
"""
from __future__ import annotations

import os
import sys
import time
from typing import IO, Callable, Optional

ESCAPE = "\x1b"


class ProgressReporter:
    """Print "Added N row(s)", overwriting the same line when the stream is a terminal."""

    def __init__(self, stream: Optional[IO[str]] = None, in_place: Optional[bool] = None) -> None:
        self.stream = stream or sys.stdout
        if in_place is None:
            isatty = getattr(self.stream, "isatty", None)
            in_place = bool(isatty and isatty())
        self.in_place = in_place
        self.started = False
        self._line_open = False

    def report(self, count: int) -> None:
        message = f"Added {count} row(s)"
        if not self.in_place:
            self.stream.write(message + "\n")
        elif not self.started:
            self.stream.write(message)
            self._line_open = True
        else:
            self.stream.write("\r" + message)
        self.started = True
        self.stream.flush()

    def finish(self) -> None:
        if self._line_open:
            self.stream.write("\n")
            self.stream.flush()
            self._line_open = False


class Stopwatch:
    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._started: Optional[float] = None
        self._stopped: Optional[float] = None

    def start(self) -> "Stopwatch":
        self._started = self._clock()
        self._stopped = None
        return self

    def stop(self) -> None:
        if self._started is not None and self._stopped is None:
            self._stopped = self._clock()

    @property
    def elapsed(self) -> float:
        if self._started is None:
            return 0.0
        end = self._stopped if self._stopped is not None else self._clock()
        return max(0.0, end - self._started)


def format_elapsed(seconds: float) -> str:
    """Format seconds as "Time elapsed: HH:MM:SS.CC" (hours wrap at 24 like a TimeSpan)."""
    centis = int(seconds * 100)
    total_seconds, cc = divmod(centis, 100)
    minutes, ss = divmod(total_seconds, 60)
    hours, mm = divmod(minutes, 60)
    return f"Time elapsed: {hours % 24:02d}:{mm:02d}:{ss:02d}.{cc:02d}"


class KeyPoller:
    """Non-blocking "was a key pressed?" check for the current console.

    Use as a context manager: on POSIX terminals it switches stdin to cbreak
    mode for the duration so single key presses are visible without Enter.
    When stdin is not a terminal, pressed() is always False.
    """

    def __init__(self, stdin: Optional[IO[str]] = None) -> None:
        self.stdin = stdin or sys.stdin
        self._saved_attrs = None
        self._enabled = False

    def __enter__(self) -> "KeyPoller":
        try:
            self._enabled = self.stdin.isatty()
        except (AttributeError, ValueError):
            self._enabled = False
        if self._enabled and os.name != "nt":
            import termios
            import tty
            fd = self.stdin.fileno()
            self._saved_attrs = termios.tcgetattr(fd)
            tty.setcbreak(fd)
        return self

    def __exit__(self, *exc) -> None:
        if self._saved_attrs is not None:
            import termios
            termios.tcsetattr(self.stdin.fileno(), termios.TCSADRAIN, self._saved_attrs)
            self._saved_attrs = None
        self._enabled = False

    def pressed(self) -> bool:
        if not self._enabled:
            return False
        if os.name == "nt":
            import msvcrt
            if msvcrt.kbhit():
                msvcrt.getwch()
                return True
            return False
        import select
        ready, _, _ = select.select([self.stdin], [], [], 0)
        if ready:
            os.read(self.stdin.fileno(), 1)
            return True
        return False


def read_key_fd(fd: int, timeout: float = 0.05) -> str:
    """Read one key press from a POSIX fd.

    Arrow and function keys arrive as an escape sequence starting with ESC;
    the whole sequence is returned so only a lone ESC equals ESCAPE.
    """
    import select
    data = os.read(fd, 1)
    if data == ESCAPE.encode():
        while select.select([fd], [], [], timeout)[0]:
            more = os.read(fd, 32)
            if not more:
                break
            data += more
    return data.decode("utf-8", "replace")


def read_console_key(stdin: Optional[IO[str]] = None) -> str:
    """Block for one key press. Returns "" at end of input."""
    stdin = stdin or sys.stdin
    if os.name == "nt" and stdin.isatty():
        import msvcrt
        return msvcrt.getwch()
    if stdin.isatty():
        import termios
        import tty
        fd = stdin.fileno()
        saved = termios.tcgetattr(fd)
        try:
            tty.setcbreak(fd)
            return read_key_fd(fd)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, saved)
    return stdin.read(1)


def wait_for_escape(read_key: Callable[[], str]) -> None:
    """Block until Escape is pressed; other keys are ignored."""
    while True:
        key = read_key()
        if key == ESCAPE or key == "":
            return
