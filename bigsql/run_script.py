#!/usr/bin/env python3
"""
Run a large SQL script against SQL Server in GO-delimited batches.

Usage:
  python -m bigsql.run_script [--connection-string STR] [--script PATH]
                              [--log-file PATH | --no-log] [--encoding ENC]
                              [--driver NAME] [--timeout SECONDS] [--no-wait]

Anything not given by flag or environment (BIGSQL_CONNECTION_STRING,
BIGSQL_SCRIPT, BIGSQL_LOG_FILE, ...) is asked for interactively.

Behavior:
  - A batch is sent when the joined, trimmed text ends with upper-case GO
  - A failing batch is reported (and logged) and the run continues
  - A lost connection or unexpected error stops the run; the summary is still printed
  - Any key cancels the run; Esc closes the console at the end
"""
from __future__ import annotations

import argparse
import codecs
import sys
from typing import IO, Callable, List, Optional

from .batch_executor import CANCELLED, FAILED, BatchExecutor, BatchResult
from .config import Settings, build_connection_string
from .connection import close_quietly, error_message, open_connection
from .console import KeyPoller, ProgressReporter, Stopwatch, format_elapsed, read_console_key, wait_for_escape
from .prompts import InputClosed, Prompter
from .run_log import RunLog
from .script_reader import ScriptReader, open_script


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="bigsql-run", description="Run a big SQL script in GO-delimited batches")
    ap.add_argument("--connection-string", default=None, help="ODBC or ADO.NET style connection string")
    ap.add_argument("--script", default=Settings.script, help="Path of the SQL script to run")
    log = ap.add_mutually_exclusive_group()
    log.add_argument("--log-file", default=None, help="Write a run log to this .txt/.log file")
    log.add_argument("--no-log", action="store_true", help="Do not write a run log and do not ask")
    ap.add_argument("--encoding", default=Settings.encoding, help="Script file encoding (default utf-8-sig)")
    ap.add_argument("--driver", default=Settings.driver, help="ODBC driver used when the string names none")
    ap.add_argument("--timeout", type=int, default=Settings.login_timeout, help="Login timeout in seconds")
    ap.add_argument("--no-wait", action="store_true", default=Settings.no_wait,
                    help="Exit right after the summary instead of waiting for Esc")
    return ap


class RunSession:
    """Everything a run owns; close() releases it all and never raises."""

    def __init__(self, connection, script: ScriptReader, log: Optional[RunLog] = None) -> None:
        self.connection = connection
        self.script = script
        self.log = log

    def close(self) -> None:
        close_quietly(self.script)
        close_quietly(self.connection)
        close_quietly(self.log)


def report_error(message: str, log: Optional[RunLog], out: IO[str]) -> None:
    if log is not None:
        log.error(message)
    out.write(message + "\n")
    out.flush()


def execute(session: RunSession, out: IO[str], cancelled: Callable[[], bool] = lambda: False,
            progress: Optional[ProgressReporter] = None) -> BatchResult:
    """Run the batch loop over the session's script and print the summary."""
    out.write("Running...\n")
    out.flush()
    executor = BatchExecutor(
        session.connection,
        progress=progress or ProgressReporter(out),
        on_error=lambda message: report_error(message, session.log, out),
        cancelled=cancelled,
    )
    try:
        result = executor.run(session.script)
    except Exception as e:
        # cursor() itself failed, e.g. the connection dropped before the first batch
        report_error(error_message(e), session.log, out)
        result = BatchResult(rows_affected=executor.counter, outcome=FAILED, error=e)

    if session.log is not None:
        session.log.completed(result.rows_affected)
    if result.outcome == CANCELLED:
        out.write("Cancelled by user\n")
    out.write("Completed\n")
    out.write(f"Total {result.rows_affected} rows added to database\n")
    out.flush()
    return result


def main(argv: List[str], stdin: Optional[IO[str]] = None, stdout: Optional[IO[str]] = None,
         connect: Optional[Callable[[str], object]] = None,
         read_key: Optional[Callable[[], str]] = None) -> int:
    args = build_parser().parse_args(argv[1:])
    stdin = stdin or sys.stdin
    out = stdout or sys.stdout
    try:
        codecs.lookup(args.encoding)
    except LookupError:
        out.write(f"[Error] Unknown script encoding: {args.encoding}\n")
        out.flush()
        return 2
    log_file = None if args.no_log else (args.log_file or Settings.log_file)
    prompter = Prompter(stdin, out)
    connect = connect or (lambda raw: open_connection(raw, args.driver, args.timeout))

    connection = None
    script = None
    log = None
    prompter.print_notes()
    try:
        connection = prompter.connection(connect, initial=args.connection_string or build_connection_string())
        script = prompter.script(lambda path: open_script(path, args.encoding), initial=args.script)
        if log_file:
            log = prompter.log_file(script.path, initial=log_file)
        elif not args.no_log and prompter.enable_log():
            log = prompter.log_file(script.path)
    except (InputClosed, KeyboardInterrupt) as e:
        out.write(f"\n[Error] Setup aborted: {e}\n")
        out.flush()
        RunSession(connection, script, log).close()
        return 2

    session = RunSession(connection, script, log)
    stopwatch = Stopwatch().start()
    result = None
    try:
        with KeyPoller(stdin) as keys:
            result = execute(session, out, cancelled=keys.pressed)
    except Exception as e:
        report_error(error_message(e), log, out)
    finally:
        session.close()
        stopwatch.stop()
        out.write(format_elapsed(stopwatch.elapsed) + "\n")
        out.flush()
        if not args.no_wait:
            wait_for_escape(read_key or (lambda: read_console_key(stdin)))

    if result is None or result.outcome == FAILED:
        return 1
    return 0


def cli() -> int:
    return main(sys.argv)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
