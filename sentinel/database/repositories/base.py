from abc import ABC, abstractmethod
from datetime import datetime

from sentinel.lifecycle.models import FileRecord


class BaseFileRepository(ABC):
    """Contract for file record storage.

    Implementations have an explicit lifecycle: ``open()`` before use,
    ``close()`` when done. Every mutating call runs in its own transaction.
    """

    @abstractmethod
    def open(self) -> None:
        """Acquire storage resources (pools, schema)."""

    @abstractmethod
    def close(self) -> None:
        """Release storage resources."""

    @abstractmethod
    def add(self, record: FileRecord) -> None:
        """Insert a new record."""

    @abstractmethod
    def get(self, file_id: str) -> FileRecord:
        """Fetch a record by id.

        Raises:
            RecordNotFoundError: if no record with this id exists.
        """

    @abstractmethod
    def update(self, record: FileRecord) -> None:
        """Persist every mutable field of an existing record.

        Raises:
            RecordNotFoundError: if the record no longer exists.
        """

    @abstractmethod
    def delete(self, file_id: str) -> bool:
        """Remove a record. Returns False if it was already gone."""

    @abstractmethod
    def list_created_before(self, cutoff: datetime) -> list[FileRecord]:
        """Records whose ``created_at`` is strictly older than ``cutoff``."""

    @abstractmethod
    def count(self) -> int:
        """Number of live records."""
