import os

import pytest

from breathe.cleaner import (
    Cleaner,
    PathTraversalError,
    ProtectedPathError,
    validate_path,
)
from breathe.history import HistoryDB, OpType


@pytest.fixture
def home(tmp_path, monkeypatch):
    home_dir = tmp_path / "home"
    (home_dir / ".Trash").mkdir(parents=True)
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def work(tmp_path):
    work_dir = tmp_path / "work"
    work_dir.mkdir()
    return work_dir


def test_relative_path_rejected():
    with pytest.raises(ValueError, match="path must be absolute"):
        validate_path("relative/path")


@pytest.mark.parametrize("path", ["/", "/usr", "/etc", "/usr/", "/home", "/System"])
def test_protected_paths_rejected(path):
    with pytest.raises(ProtectedPathError, match="refusing to delete protected system path"):
        validate_path(path)


def test_traversal_rejected():
    with pytest.raises(PathTraversalError, match="directory traversal"):
        validate_path("/tmp/a/../b")


def test_top_level_directory_rejected():
    with pytest.raises(ProtectedPathError, match="top-level directory"):
        validate_path("/somedir")


def test_home_directory_rejected(home):
    with pytest.raises(ProtectedPathError, match="home directory"):
        validate_path(str(home))


def test_permanent_delete_file(home, work):
    target = work / "junk.bin"
    target.write_bytes(b"abcdef")
    validate_path(str(target))
    op = Cleaner(None, False).delete(str(target))
    assert not target.exists()
    assert op.type is OpType.DELETE
    assert op.file_size == len(b"abcdef")
    assert op.reversible is False
    assert op.dest_path == ""


def test_permanent_delete_directory_sums_sizes(home, work):
    target = work / "build"
    (target / "sub").mkdir(parents=True)
    (target / "a.txt").write_bytes(b"hello")
    (target / "sub" / "b.txt").write_bytes(b"world!")
    op = Cleaner(None, False).delete(str(target))
    assert not target.exists()
    assert op.file_size == len(b"hello") + len(b"world!")


def test_trash_moves_file(home, work):
    target = work / "report.pdf"
    target.write_bytes(b"data")
    op = Cleaner(None, True).delete(str(target))
    trashed = home / ".Trash" / "report.pdf"
    assert not target.exists()
    assert trashed.read_bytes() == b"data"
    assert op.type is OpType.TRASH
    assert op.dest_path == str(trashed)
    assert op.reversible is True


def test_trash_duplicate_gets_pid_suffix(home, work):
    (home / ".Trash" / "report.pdf").write_bytes(b"old")
    target = work / "report.pdf"
    target.write_bytes(b"new")
    op = Cleaner(None, True).delete(str(target))
    expected = home / ".Trash" / f"report.pdf_{os.getpid()}"
    assert op.dest_path == str(expected)
    assert expected.read_bytes() == b"new"
    assert (home / ".Trash" / "report.pdf").read_bytes() == b"old"


def test_missing_file_raises(home, work):
    with pytest.raises(FileNotFoundError):
        Cleaner(None, False).delete(str(work / "absent"))


def test_delete_is_recorded(home, work, tmp_path):
    target = work / "recorded.log"
    target.write_bytes(b"xyz")
    with HistoryDB(tmp_path / "history.db") as db:
        op = Cleaner(db, False).delete(str(target))
        ops = db.search("recorded.log")
        assert len(ops) == 1
        assert ops[0].id == op.id
        assert ops[0].type is OpType.DELETE
        assert ops[0].source_path == str(target)
        assert ops[0].file_size == len(b"xyz")


def test_protected_path_never_touched(home):
    with pytest.raises(ProtectedPathError):
        Cleaner(None, False).delete("/usr")
    assert os.path.isdir("/usr")