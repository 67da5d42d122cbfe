"""
Open and validate the pyodbc connection used for a run, and classify driver errors.
"""
from __future__ import annotations

from typing import Optional

import pyodbc

from .config import DEFAULT_DRIVER, normalize_connection_string


class ConnectionNotOpen(Exception):
    pass


def error_message(exc: BaseException) -> str:
    """Return the driver's message text for a pyodbc error, otherwise str(exc)."""
    if isinstance(exc, pyodbc.Error) and len(exc.args) > 1:
        return str(exc.args[1])
    return str(exc)


def sqlstate(exc: BaseException) -> Optional[str]:
    if isinstance(exc, pyodbc.Error) and exc.args:
        state = str(exc.args[0])
        if len(state) == 5:
            return state
    return None


def is_recoverable(exc: BaseException) -> bool:
    """True if the server rejected one batch and the run can go on.

    Connection-class SQLSTATEs (08xxx) mean the link is gone, so they are fatal
    even though pyodbc raises them as DatabaseError subclasses.
    """
    if not isinstance(exc, pyodbc.DatabaseError):
        return False
    state = sqlstate(exc)
    return not (state and state.startswith("08"))


def open_connection(raw: str, driver: str = DEFAULT_DRIVER, timeout: int = 30) -> pyodbc.Connection:
    conn_str = normalize_connection_string(raw, driver)
    cnxn = pyodbc.connect(conn_str, autocommit=True, timeout=timeout)
    if getattr(cnxn, "closed", False):
        raise ConnectionNotOpen("Your database connection is in Closed status")
    return cnxn


def close_quietly(resource) -> None:
    if resource is None:
        return
    try:
        resource.close()
    except Exception:
        pass
