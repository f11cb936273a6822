from datetime import datetime
from pathlib import Path
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from sentinel.database.connection import Database
from sentinel.database.repositories.base import BaseFileRepository
from sentinel.database.schema import FILE_COLUMNS, FILES_SCHEMA
from sentinel.lifecycle.exceptions import RecordNotFoundError
from sentinel.lifecycle.models import FileRecord, FileState, PaymentState, ProcessingMode
from sentinel.processor.evidence_serializer import EvidenceSerializer

_SELECT_COLUMNS = ", ".join(FILE_COLUMNS)


class PostgresFileRepository(BaseFileRepository):
    """Database operations for the files table."""

    def __init__(
        self,
        database: Database,
        serializer: EvidenceSerializer | None = None,
    ) -> None:
        self._database = database
        self._serializer = serializer if serializer is not None else EvidenceSerializer()

    def open(self) -> None:
        """Open the pool and create the files table if it does not exist."""
        self._database.open()
        with self._database.connection() as conn:
            conn.execute(FILES_SCHEMA)
            conn.commit()

    def close(self) -> None:
        self._database.close()

    def add(self, record: FileRecord) -> None:
        placeholders = ", ".join(["%s"] * len(FILE_COLUMNS))
        with self._database.connection() as conn:
            conn.execute(
                f"INSERT INTO files ({_SELECT_COLUMNS}) VALUES ({placeholders})",
                self._to_params(record),
            )
            conn.commit()

    def get(self, file_id: str) -> FileRecord:
        """Find a file record by ID.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """
        with self._database.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"SELECT {_SELECT_COLUMNS} FROM files WHERE id = %s",
                    (file_id,),
                )
                row = cur.fetchone()

        if row is None:
            raise RecordNotFoundError(f"File {file_id} not found")
        return self._from_row(row)

    def update(self, record: FileRecord) -> None:
        """Persist all mutable columns of a record.

        Raises:
            RecordNotFoundError: if no record with this ID exists.
        """
        with self._database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE files
                    SET processed_path = %s,
                        preview_path = %s,
                        state = %s,
                        payment_state = %s,
                        algorithm = %s,
                        custom_payload = %s,
                        algorithm_result = %s,
                        payment_order_id = %s,
                        updated_at = %s
                    WHERE id = %s
                    """,
                    (
                        _path_or_none(record.processed_path),
                        _path_or_none(record.preview_path),
                        record.state.value,
                        int(record.payment_state),
                        record.algorithm.value if record.algorithm else None,
                        record.custom_payload,
                        self._evidence_param(record),
                        record.payment_order_id,
                        record.updated_at,
                        record.id,
                    ),
                )
                if cur.rowcount == 0:
                    raise RecordNotFoundError(f"File {record.id} not found")
            conn.commit()

    def delete(self, file_id: str) -> bool:
        with self._database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("DELETE FROM files WHERE id = %s", (file_id,))
                deleted = cur.rowcount > 0
            conn.commit()
        return deleted

    def list_created_before(self, cutoff: datetime) -> list[FileRecord]:
        with self._database.connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_SELECT_COLUMNS}
                    FROM files
                    WHERE created_at < %s
                    ORDER BY created_at
                    """,
                    (cutoff,),
                )
                rows = cur.fetchall()
        return [self._from_row(row) for row in rows]

    def count(self) -> int:
        with self._database.connection() as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT COUNT(*) FROM files")
                row = cur.fetchone()
        return int(row[0]) if row else 0

    def _to_params(self, record: FileRecord) -> tuple[object, ...]:
        return (
            record.id,
            record.original_name,
            record.mime_type,
            record.size_bytes,
            str(record.source_path),
            _path_or_none(record.processed_path),
            _path_or_none(record.preview_path),
            record.state.value,
            int(record.payment_state),
            record.algorithm.value if record.algorithm else None,
            record.custom_payload,
            self._evidence_param(record),
            record.payment_order_id,
            record.created_at,
            record.updated_at,
        )

    def _evidence_param(self, record: FileRecord) -> Jsonb | None:
        if record.algorithm_result is None:
            return None
        return Jsonb(self._serializer.to_payload(record.algorithm_result))

    def _from_row(self, row: dict[str, Any]) -> FileRecord:
        evidence = row["algorithm_result"]
        return FileRecord(
            id=row["id"],
            original_name=row["original_name"],
            mime_type=row["mime_type"],
            size_bytes=row["size_bytes"],
            source_path=Path(row["source_path"]),
            processed_path=_path_from(row["processed_path"]),
            preview_path=_path_from(row["preview_path"]),
            state=FileState(row["state"]),
            payment_state=PaymentState(row["payment_state"]),
            algorithm=ProcessingMode(row["algorithm"]) if row["algorithm"] else None,
            custom_payload=row["custom_payload"],
            algorithm_result=(
                self._serializer.from_payload(evidence) if evidence is not None else None
            ),
            payment_order_id=row["payment_order_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


def _path_or_none(path: Path | None) -> str | None:
    return str(path) if path is not None else None


def _path_from(value: str | None) -> Path | None:
    return Path(value) if value else None
