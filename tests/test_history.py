from datetime import datetime, timedelta, timezone

import pytest

from breathe.history import (
    HistoryDB,
    Operation,
    OperationNotFound,
    OpType,
    format_size,
)


@pytest.fixture
def db(tmp_path):
    with HistoryDB(tmp_path / "test.db") as database:
        yield database


def test_record_and_query(db):
    op = Operation(
        type=OpType.MOVE,
        source_path="/downloads/report.pdf",
        dest_path="/documents/report.pdf",
        file_size=1024,
        reversible=True,
    )
    op_id = db.record(op)
    assert op_id != 0
    results = db.search("report")
    assert len(results) == 1
    assert results[0].id == op_id


def test_search_by_date(db):
    db.record(Operation(type=OpType.MOVE, source_path="/old/file.txt", dest_path="/new/file.txt"))
    results = db.since(datetime.now() - timedelta(hours=1))
    assert len(results) == 1
    assert results[0].source_path == "/old/file.txt"


def test_since_future_is_empty(db):
    db.record(Operation(type=OpType.MOVE, source_path="/a", dest_path="/b"))
    assert db.since(datetime.now(timezone.utc) + timedelta(hours=1)) == []


def test_creates_directory(tmp_path):
    db_path = tmp_path / "nested" / "dir" / "test.db"
    HistoryDB(db_path).close()
    assert db_path.exists()


def test_get_round_trip(db):
    op_id = db.record(
        Operation(
            type=OpType.TRASH,
            source_path="/home/u/junk",
            dest_path="/home/u/.Trash/junk",
            file_size=42,
            file_hash="abc",
            reversible=True,
            metadata={"original_name": "junk"},
        )
    )
    op = db.get(op_id)
    assert op.type is OpType.TRASH
    assert op.source_path == "/home/u/junk"
    assert op.dest_path == "/home/u/.Trash/junk"
    assert op.file_size == 42
    assert op.file_hash == "abc"
    assert op.reversible is True
    assert op.metadata == {"original_name": "junk"}
    assert op.timestamp.tzinfo == timezone.utc


def test_get_missing_raises(db):
    with pytest.raises(OperationNotFound):
        db.get(999)


def test_search_matches_dest_path(db):
    db.record(Operation(type=OpType.MOVE, source_path="/x/a.txt", dest_path="/archive/a.txt"))
    db.record(Operation(type=OpType.DELETE, source_path="/y/b.txt"))
    results = db.search("archive")
    assert [r.source_path for r in results] == ["/x/a.txt"]


def test_search_no_match(db):
    db.record(Operation(type=OpType.DELETE, source_path="/y/b.txt"))
    assert db.search("zzz") == []


@pytest.mark.parametrize(
    "size, expected",
    [
        (0, "0 B"),
        (1023, "1023 B"),
        (1024, "1.0 KB"),
        (1536, "1.5 KB"),
        (1024 * 1024, "1.0 MB"),
        (1024 ** 3, "1.0 GB"),
    ],
)
def test_format_size(size, expected):
    assert format_size(size) == expected