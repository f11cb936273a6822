from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sentinel.database.repositories.memory_file_repository import InMemoryFileRepository
from sentinel.lifecycle.exceptions import RecordNotFoundError
from sentinel.lifecycle.models import FileRecord, FileState, PaymentState

_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _make_record(file_id: str = "abc", age_hours: int = 0) -> FileRecord:
    created = _NOW - timedelta(hours=age_hours)
    return FileRecord(
        id=file_id,
        original_name="cat.png",
        mime_type="image/png",
        size_bytes=10,
        source_path=Path(f"/uploads/{file_id}.png"),
        state=FileState.CREATED,
        payment_state=PaymentState.UNPAID,
        created_at=created,
        updated_at=created,
    )


def _make_repo() -> InMemoryFileRepository:
    repo = InMemoryFileRepository()
    repo.open()
    return repo


class TestInMemoryFileRepository:
    def test_add_and_get(self) -> None:
        repo = _make_repo()
        repo.add(_make_record())

        assert repo.get("abc") == _make_record()
        assert repo.count() == 1

    def test_get_returns_copy(self) -> None:
        repo = _make_repo()
        repo.add(_make_record())

        fetched = repo.get("abc")
        fetched.state = FileState.PAID

        assert repo.get("abc").state is FileState.CREATED

    def test_duplicate_add(self) -> None:
        repo = _make_repo()
        repo.add(_make_record())
        with pytest.raises(ValueError, match="already exists"):
            repo.add(_make_record())

    def test_missing_record(self) -> None:
        repo = _make_repo()
        with pytest.raises(RecordNotFoundError, match="File nope not found"):
            repo.get("nope")
        with pytest.raises(RecordNotFoundError):
            repo.update(_make_record("nope"))

    def test_update(self) -> None:
        repo = _make_repo()
        record = _make_record()
        repo.add(record)
        record.state = FileState.PROCESSED

        repo.update(record)

        assert repo.get("abc").state is FileState.PROCESSED

    def test_delete(self) -> None:
        repo = _make_repo()
        repo.add(_make_record())

        assert repo.delete("abc") is True
        assert repo.delete("abc") is False
        assert repo.count() == 0

    def test_list_created_before_is_oldest_first(self) -> None:
        repo = _make_repo()
        repo.add(_make_record("fresh", age_hours=1))
        repo.add(_make_record("old", age_hours=48))
        repo.add(_make_record("older", age_hours=72))

        expired = repo.list_created_before(_NOW - timedelta(hours=24))

        assert [r.id for r in expired] == ["older", "old"]

    def test_requires_open(self) -> None:
        repo = InMemoryFileRepository()
        with pytest.raises(RuntimeError, match="not open"):
            repo.count()
