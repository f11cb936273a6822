import threading
from dataclasses import replace
from datetime import datetime

from sentinel.database.repositories.base import BaseFileRepository
from sentinel.lifecycle.exceptions import RecordNotFoundError
from sentinel.lifecycle.models import FileRecord


class InMemoryFileRepository(BaseFileRepository):
    """Process-local record store.

    No persistence across restarts. Useful for local development, tests, and
    single-process deployments. Records are copied on the way in and out so
    callers never share mutable state with the store.
    """

    def __init__(self) -> None:
        self._records: dict[str, FileRecord] = {}
        self._lock = threading.Lock()
        self._open = False

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def add(self, record: FileRecord) -> None:
        with self._transaction():
            if record.id in self._records:
                raise ValueError(f"File {record.id} already exists")
            self._records[record.id] = replace(record)

    def get(self, file_id: str) -> FileRecord:
        with self._transaction():
            record = self._records.get(file_id)
            if record is None:
                raise RecordNotFoundError(f"File {file_id} not found")
            return replace(record)

    def update(self, record: FileRecord) -> None:
        with self._transaction():
            if record.id not in self._records:
                raise RecordNotFoundError(f"File {record.id} not found")
            self._records[record.id] = replace(record)

    def delete(self, file_id: str) -> bool:
        with self._transaction():
            return self._records.pop(file_id, None) is not None

    def list_created_before(self, cutoff: datetime) -> list[FileRecord]:
        with self._transaction():
            expired = [r for r in self._records.values() if r.created_at < cutoff]
        return [replace(r) for r in sorted(expired, key=lambda r: r.created_at)]

    def count(self) -> int:
        with self._transaction():
            return len(self._records)

    def _transaction(self) -> threading.Lock:
        if not self._open:
            raise RuntimeError("Repository is not open. Call open() first.")
        return self._lock
