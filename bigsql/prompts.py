"""
Interactive setup prompts. Each prompt loops until it gets a usable answer.

Streams and the connect/open functions are injectable so the loops can be
driven from tests with StringIO.
"""
from __future__ import annotations

import sys
from typing import IO, Callable, Optional

from .connection import error_message, open_connection
from .run_log import RunLog
from .script_reader import ScriptReader, open_script


class InputClosed(Exception):
    """stdin reached end of input while a prompt was waiting."""


def _header(title: str) -> str:
    return f"****************** {title} Input Data ******************"


class Prompter:
    def __init__(self, stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None) -> None:
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def say(self, text: str = "", end: str = "\n") -> None:
        self.stdout.write(text + end)
        self.stdout.flush()

    def error(self, message: str) -> None:
        self.say(f"[Error] {message}")

    def ask(self, label: str) -> str:
        self.say(label, end="")
        line = self.stdin.readline()
        if not line:
            raise InputClosed(f"No input for '{label.strip()}'")
        return line.rstrip("\r\n")

    def print_notes(self) -> None:
        self.say("NOTES:")
        self.say("\t1. To cancel running the sql script. Please press any key to do")
        self.say("\t2. To terminate the console. Please press ESC key")

    def connection(self, connect: Callable[[str], object] = open_connection,
                   initial: Optional[str] = None):
        """Return an open connection, re-prompting until one can be opened."""
        self.say()
        self.say(_header("Connection String"))
        candidate = initial
        while True:
            if candidate is None:
                self.say("e.g: Server=localhost;Database=DatabaseName;User Id=sa;Password=123;")
                candidate = self.ask("Connection String: ")
            try:
                return connect(candidate)
            except Exception as e:
                self.error(error_message(e))
            candidate = None

    def script(self, opener: Callable[[str], ScriptReader] = open_script,
               initial: Optional[str] = None) -> ScriptReader:
        self.say()
        self.say(_header("Big Sql Script File Path"))
        candidate = initial
        while True:
            if candidate is None:
                self.say("e.g: c:\\bigsqlscript.sql")
                candidate = self.ask("Big Sql Script File Path: ").strip()
            if candidate:
                try:
                    return opener(candidate)
                except OSError as e:
                    self.error(e.strerror or str(e))
            candidate = None

    def enable_log(self) -> bool:
        self.say()
        self.say(_header("Enabled Log To File"))
        while True:
            self.say("e.g: yes or no")
            answer = self.ask("Enable log to file(yes/no)? ").strip().lower()
            if answer in ("yes", "no"):
                return answer == "yes"
            self.error("Please enter either of two values following: yes or no")

    def log_file(self, script_path: str, opener: Callable[[str, str], RunLog] = RunLog.open,
                 initial: Optional[str] = None) -> RunLog:
        self.say()
        self.say(_header("Log File Path"))
        candidate = initial
        while True:
            if candidate is None:
                self.say("e.g: c:\\log.txt")
                candidate = self.ask("Log File Path: ").strip()
            try:
                return opener(candidate, script_path)
            except ValueError as e:
                self.error(str(e))
            except OSError as e:
                self.error(e.strerror or str(e))
            candidate = None
