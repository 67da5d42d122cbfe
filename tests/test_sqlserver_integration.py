"""
End-to-end run against a real SQL Server.

Set BIGSQL_TEST_CONNECTION_STRING to an empty scratch database to enable, e.g.
  Server=localhost;Database=bigsql_test;User Id=sa;Password=...;TrustServerCertificate=yes
"""
import io
import os
import uuid

import pytest

from bigsql.connection import open_connection
from bigsql.run_script import RunSession, execute
from bigsql.script_reader import open_script

CONN_STR = os.getenv("BIGSQL_TEST_CONNECTION_STRING")

pytestmark = pytest.mark.skipif(not CONN_STR, reason="BIGSQL_TEST_CONNECTION_STRING is not set. Skipping integration test.")


def test_create_and_two_inserts_add_two_rows(tmp_path):
    table = f"bigsql_t_{uuid.uuid4().hex[:8]}"
    path = tmp_path / "big.sql"
    path.write_text(
        f"CREATE TABLE {table}(x INT) GO\n"
        f"INSERT INTO {table} VALUES(1) GO\n"
        f"INSERT INTO {table} VALUES(2) GO\n",
        encoding="utf-8",
    )
    session = RunSession(open_connection(CONN_STR), open_script(str(path)))
    try:
        result = execute(session, io.StringIO())
    finally:
        session.close()
    assert result.rows_affected == 2
    assert result.batches_executed == 3

    cn = open_connection(CONN_STR)
    try:
        cur = cn.cursor()
        cur.execute(f"SELECT COUNT(*) FROM {table}")
        assert cur.fetchone()[0] == 2
        cur.execute(f"DROP TABLE {table}")
    finally:
        cn.close()


def test_bad_batch_does_not_stop_the_run(tmp_path):
    path = tmp_path / "bad.sql"
    path.write_text("SELECT * FROMM nowhere GO\nSELECT 1 GO\n", encoding="utf-8")
    session = RunSession(open_connection(CONN_STR), open_script(str(path)))
    try:
        result = execute(session, io.StringIO())
    finally:
        session.close()
    assert result.batches_failed == 1
    assert result.batches_executed == 1
