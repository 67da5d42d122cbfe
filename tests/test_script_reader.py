import pytest

from bigsql.script_reader import ScriptNotFoundError, open_script


def test_lines_are_read_lazily_without_terminators(tmp_path):
    path = tmp_path / "big.sql"
    path.write_bytes(b"SELECT 1\r\nGO\r\n\r\nSELECT 2\nGO")
    with open_script(str(path)) as reader:
        assert reader.read_line() == "SELECT 1"
        assert list(reader) == ["GO", "", "SELECT 2", "GO"]
        assert reader.read_line() is None


def test_utf8_bom_is_skipped(tmp_path):
    path = tmp_path / "bom.sql"
    path.write_bytes("\ufeffPRINT N'héllo' GO\n".encode("utf-8"))
    with open_script(str(path)) as reader:
        assert list(reader) == ["PRINT N'héllo' GO"]


def test_other_encodings(tmp_path):
    path = tmp_path / "latin.sql"
    path.write_bytes("PRINT 'café'\n".encode("latin-1"))
    with open_script(str(path), encoding="latin-1") as reader:
        assert reader.read_line() == "PRINT 'café'"


def test_missing_file(tmp_path):
    with pytest.raises(ScriptNotFoundError) as exc:
        open_script(str(tmp_path / "missing.sql"))
    assert "hasn't existed" in str(exc.value)
    assert isinstance(exc.value, FileNotFoundError)


def test_directory_is_not_a_script(tmp_path):
    with pytest.raises(ScriptNotFoundError):
        open_script(str(tmp_path))


def test_closed_reader_is_exhausted(tmp_path):
    path = tmp_path / "a.sql"
    path.write_text("SELECT 1\n", encoding="utf-8")
    reader = open_script(str(path))
    reader.close()
    reader.close()
    assert reader.read_line() is None
