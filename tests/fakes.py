import pyodbc


class FakeCursor:
    """DB-API cursor stand-in. ``results`` maps batch text to a rowcount,
    a list of rowcounts (one per result set) or an exception to raise."""

    def __init__(self, results=None, default=-1):
        self.results = results or {}
        self.default = default
        self.executed = []
        self.closed = False
        self._pending = []
        self.rowcount = -1

    def execute(self, sql):
        self.executed.append(sql)
        outcome = self.results.get(sql.strip(), self.default)
        if isinstance(outcome, BaseException):
            raise outcome
        counts = outcome if isinstance(outcome, list) else [outcome]
        self.rowcount = counts[0]
        self._pending = list(counts[1:])
        return self

    def nextset(self):
        if not self._pending:
            return False
        self.rowcount = self._pending.pop(0)
        return True

    def close(self):
        self.closed = True


class FakeConnection:
    def __init__(self, results=None, default=-1):
        self.cursor_obj = FakeCursor(results, default)
        self.closed = False

    def cursor(self):
        return self.cursor_obj

    def close(self):
        self.closed = True

    @property
    def executed(self):
        return self.cursor_obj.executed


def sql_error(message="Incorrect syntax near 'FROMM'.", state="42000"):
    return pyodbc.ProgrammingError(state, f"[{state}] [Microsoft][ODBC Driver 18 for SQL Server][SQL Server]{message} (102)")


def link_error(state="08S01"):
    return pyodbc.OperationalError(state, f"[{state}] [Microsoft][ODBC Driver 18 for SQL Server]Communication link failure (0)")
