from collections.abc import Iterator
from dataclasses import dataclass
from datetime import datetime
from enum import Enum, IntEnum
from pathlib import Path

from sentinel.engine.models import Evidence


class PaymentState(IntEnum):
    """Tri-state payment flag, persisted as the integer value."""

    FREE_TIER = -1
    UNPAID = 0
    PAID = 1


class FileState(str, Enum):
    CREATED = "created"
    PROCESSED = "processed"
    PAID = "paid"
    FREE_VERIFIED = "free_verified"


class ProcessingMode(str, Enum):
    WATERMARK = "watermark"
    FORENSICS = "forensics"


@dataclass
class FileRecord:
    """One user submission through its whole lifecycle."""

    id: str
    original_name: str
    mime_type: str
    size_bytes: int
    source_path: Path
    state: FileState
    payment_state: PaymentState
    created_at: datetime
    updated_at: datetime
    processed_path: Path | None = None
    preview_path: Path | None = None
    algorithm: ProcessingMode | None = None
    custom_payload: str | None = None
    algorithm_result: Evidence | None = None
    payment_order_id: str | None = None

    def artifact_paths(self) -> list[Path]:
        """Every file on disk that belongs to this record."""
        paths = [self.source_path, self.processed_path, self.preview_path]
        return [path for path in paths if path is not None]


@dataclass(frozen=True)
class PaymentInitiation:
    order_id: str
    redirect_form: str


@dataclass
class Download:
    """An opened, paid artifact ready to be streamed to the client."""

    filename: str
    media_type: str
    size_bytes: int
    chunks: Iterator[bytes]


@dataclass(frozen=True)
class SweepReport:
    removed: int
    missing_files: int
    failed: int = 0
