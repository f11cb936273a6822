import mimetypes
import os
import time
import uuid
from collections.abc import Iterator, Mapping
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import BinaryIO

from sentinel.api.schemas import VerifyRequest
from sentinel.config.settings import Settings
from sentinel.database.repositories.base import BaseFileRepository
from sentinel.engine import watermark
from sentinel.engine.exceptions import EngineError, ImageNotFoundError
from sentinel.engine.models import ExtractionEvidence
from sentinel.engine_client.base import BaseEngineClient
from sentinel.engine_client.exceptions import UpstreamUnavailableError
from sentinel.engine_client.factory import EngineClientFactory
from sentinel.lifecycle.exceptions import (
    ArtifactMissingError,
    InvalidUploadError,
    PaymentRequiredError,
    ProcessingError,
    RecordNotFoundError,
)
from sentinel.lifecycle.locks import KeyedLock
from sentinel.lifecycle.models import (
    Download,
    FileRecord,
    FileState,
    PaymentInitiation,
    PaymentState,
    ProcessingMode,
    SweepReport,
)
from sentinel.lifecycle.storage import ArtifactStore
from sentinel.lifecycle.transitions import (
    can_transition,
    mark_free_verified,
    mark_paid,
    require_transition,
)
from sentinel.logging.logger import Log
from sentinel.payment.base import BasePaymentGateway
from sentinel.payment.factory import PaymentGatewayFactory
from sentinel.payment.models import PaymentOrder
from sentinel.processor.pipeline import ProcessingContext
from sentinel.processor.processor import Processor, build_processor

ALLOWED_EXTENSIONS = frozenset({".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp"})
DOWNLOAD_CHUNK_BYTES = 64 * 1024
DOWNLOAD_PREFIX = "Sentinel_"
CALLBACK_SUCCESS = "success"
CALLBACK_FAIL = "fail"


class FileLifecycleManager:
    """Owns file records from upload to retention sweep.

    Every operation that mutates a record or its artifacts runs under the
    per-id lock. Reads do not lock: they open what is on disk and report a
    vanished file as ArtifactMissingError.
    """

    def __init__(
        self,
        *,
        settings: Settings,
        repository: BaseFileRepository,
        store: ArtifactStore,
        engine_client: BaseEngineClient,
        payment_gateway: BasePaymentGateway,
        processor: Processor,
        locks: KeyedLock | None = None,
    ) -> None:
        self._settings = settings
        self._repository = repository
        self._store = store
        self._engine_client = engine_client
        self._payment_gateway = payment_gateway
        self._processor = processor
        self._locks = locks if locks is not None else KeyedLock()

    def upload(
        self,
        data: bytes,
        original_name: str,
        *,
        mime_type: str | None = None,
        custom_payload: str | None = None,
        free_tier: bool = False,
    ) -> FileRecord:
        """Store an uploaded image and create its record in ``created``.

        Raises:
            InvalidUploadError: empty, oversized, or not an image.
            ProcessingError: ``custom_payload`` can never be embedded.
        """
        extension = Path(original_name).suffix.lower()
        if not data:
            raise InvalidUploadError("Upload is empty")
        if len(data) > self._settings.max_upload_bytes:
            raise InvalidUploadError(
                f"Upload is {len(data)} bytes, limit is {self._settings.max_upload_bytes}"
            )
        if extension not in ALLOWED_EXTENSIONS:
            raise InvalidUploadError(f"Unsupported file type '{extension or original_name}'")
        if custom_payload is not None:
            try:
                watermark.encode_payload(custom_payload)
            except EngineError as exc:
                raise ProcessingError(exc.code) from exc

        file_id = uuid.uuid4().hex
        source_path = self._store.save_upload(file_id, extension, data)
        now = datetime.now(timezone.utc)
        record = FileRecord(
            id=file_id,
            original_name=original_name,
            mime_type=mime_type or _media_type(extension),
            size_bytes=len(data),
            source_path=source_path,
            state=FileState.CREATED,
            payment_state=PaymentState.FREE_TIER if free_tier else PaymentState.UNPAID,
            created_at=now,
            updated_at=now,
            custom_payload=custom_payload,
        )
        try:
            self._repository.add(record)
        except Exception:
            self._store.remove(source_path)
            raise
        Log.info(f"File {file_id} uploaded", name=original_name, size=len(data))
        return record

    def process(
        self,
        file_id: str,
        mode: ProcessingMode | str,
        payload: str | None = None,
    ) -> FileRecord:
        """Run the watermark or forensic engine on the upload.

        Raises:
            RecordNotFoundError: no such record.
            IllegalTransitionError: record is paid, free-tier, or verified.
            ArtifactMissingError: the upload is gone from disk.
            ProcessingError: the engine failed; ``code`` says why.
        """
        mode = ProcessingMode(mode)
        context = ProcessingContext(file_id=file_id, mode=mode, payload=payload)
        with self._locks.hold(file_id):
            try:
                context = self._processor.process(context)
            except ImageNotFoundError as exc:
                raise ArtifactMissingError(f"Upload for file {file_id} is gone") from exc
            except (EngineError, UpstreamUnavailableError) as exc:
                Log.warning(f"Engine failure for file {file_id}: {exc}", code=exc.code)
                raise ProcessingError(exc.code) from exc
        if context.record is None:
            raise RecordNotFoundError(f"File {file_id} disappeared during processing")
        return context.record

    def initiate_payment(self, file_id: str) -> PaymentInitiation:
        """Ask the gateway for a checkout form for a processed file."""
        record = self._repository.get(file_id)
        require_transition(record, FileState.PAID)
        order_id = f"{file_id}_{int(time.time() * 1000)}"
        order = PaymentOrder(
            order_id=order_id,
            file_id=file_id,
            amount=self._settings.payment_amount,
            subject=self._settings.payment_subject,
        )
        redirect_form = self._payment_gateway.initiate(order)
        Log.info(f"Payment initiated for file {file_id}", order_id=order_id)
        return PaymentInitiation(order_id=order_id, redirect_form=redirect_form)

    def confirm_payment(self, order_id: str) -> bool:
        """Move the order's record to ``paid``. Returns False if nothing changed.

        Safe to call any number of times for the same order.
        """
        file_id = file_id_from_order(order_id)
        if not file_id:
            Log.warning(f"Malformed order id '{order_id}'")
            return False

        with self._locks.hold(file_id):
            try:
                record = self._repository.get(file_id)
            except RecordNotFoundError:
                Log.warning(f"Payment for unknown file {file_id}", order_id=order_id)
                return False
            if record.payment_state is PaymentState.PAID:
                Log.info(f"Payment for file {file_id} already confirmed", order_id=order_id)
                return False
            if not can_transition(record, FileState.PAID):
                Log.warning(
                    f"Ignoring payment for file {file_id} in state {record.state.value}",
                    order_id=order_id,
                )
                return False
            self._repository.update(mark_paid(record, order_id))

        Log.info(f"Payment confirmed for file {file_id}", order_id=order_id)
        return True

    def handle_payment_callback(self, payload: Mapping[str, str]) -> str:
        """Answer an asynchronous gateway notification with "success" or "fail"."""
        try:
            verification = self._payment_gateway.verify_callback(payload)
        except Exception as exc:
            Log.error(f"Payment callback could not be verified: {exc}")
            return CALLBACK_FAIL

        if not verification.valid or verification.order_id is None:
            Log.warning("Payment callback rejected: bad signature")
            return CALLBACK_FAIL
        if verification.succeeded:
            self.confirm_payment(verification.order_id)
        return CALLBACK_SUCCESS

    def download(self, file_id: str) -> Download:
        """Open the full-resolution result of a paid file for streaming.

        Raises:
            PaymentRequiredError: the record is not paid, whatever is on disk.
            ArtifactMissingError: the result was swept or never written.
        """
        record = self._repository.get(file_id)
        if record.payment_state is not PaymentState.PAID:
            raise PaymentRequiredError(f"File {file_id} has not been paid for")

        handle = self._store.open(record.processed_path)
        suffix = Path(handle.name).suffix
        size = os.fstat(handle.fileno()).st_size
        return Download(
            filename=f"{DOWNLOAD_PREFIX}{Path(record.original_name).stem}{suffix}",
            media_type=_media_type(suffix),
            size_bytes=size,
            chunks=_read_chunks(handle),
        )

    def preview(self, file_id: str) -> Path:
        path = self._repository.get(file_id).preview_path
        if path is None or not self._store.exists(path):
            raise ArtifactMissingError(f"File {file_id} has no preview")
        return path

    def verify_free(self, file_id: str) -> ExtractionEvidence:
        """Check an image for a watermark without payment.

        Reads the processed artifact when present, else the upload. A
        free-tier record still in ``created`` moves to ``free_verified``.
        """
        with self._locks.hold(file_id):
            record = self._repository.get(file_id)
            target = (
                record.processed_path
                if self._store.exists(record.processed_path)
                else record.source_path
            )
            if not self._store.exists(target):
                raise ArtifactMissingError(f"No image on disk for file {file_id}")

            try:
                response = self._engine_client.verify(VerifyRequest(input_path=str(target)))
            except ImageNotFoundError as exc:
                raise ArtifactMissingError(f"Image for file {file_id} is gone") from exc
            except (EngineError, UpstreamUnavailableError) as exc:
                Log.warning(f"Verification failed for file {file_id}: {exc}", code=exc.code)
                raise ProcessingError(exc.code) from exc

            evidence = ExtractionEvidence(
                found=response.success,
                confidence=response.confidence_score,
                extracted_text=response.extracted_text,
            )
            if can_transition(record, FileState.FREE_VERIFIED):
                self._repository.update(mark_free_verified(record, evidence))
                Log.info(f"File {file_id} free-verified", found=evidence.found)
        return evidence

    def get(self, file_id: str) -> FileRecord:
        return self._repository.get(file_id)

    def count(self) -> int:
        return self._repository.count()

    def sweep(
        self,
        retention: timedelta | None = None,
        now: datetime | None = None,
    ) -> SweepReport:
        """Delete records older than the retention window and their artifacts.

        A failure on one record is logged and counted; the sweep carries on.
        """
        window = retention if retention is not None else timedelta(
            hours=self._settings.retention_hours
        )
        cutoff = (now or datetime.now(timezone.utc)) - window
        expired = self._repository.list_created_before(cutoff)
        Log.info(f"Sweeping {len(expired)} records created before {cutoff.isoformat()}")

        removed = missing_files = failed = 0
        for candidate in expired:
            try:
                with self._locks.hold(candidate.id):
                    try:
                        record = self._repository.get(candidate.id)
                    except RecordNotFoundError:
                        continue
                    for path in record.artifact_paths():
                        if not self._store.remove(path):
                            missing_files += 1
                    if self._repository.delete(record.id):
                        removed += 1
            except Exception as exc:
                failed += 1
                Log.exception(f"Sweep failed for file {candidate.id}: {exc}")

        report = SweepReport(removed=removed, missing_files=missing_files, failed=failed)
        Log.info(
            "Sweep finished",
            removed=report.removed,
            missing_files=report.missing_files,
            failed=report.failed,
        )
        return report

    def close(self) -> None:
        self._engine_client.close()


def file_id_from_order(order_id: str) -> str:
    """Order ids are ``<file_id>_<epoch millis>``; file ids never contain ``_``."""
    file_id, separator, _ = order_id.partition("_")
    return file_id if separator else ""


def build_manager(settings: Settings, repository: BaseFileRepository) -> FileLifecycleManager:
    """Build a manager wired to the configured engine client and payment gateway."""
    store = ArtifactStore(settings.upload_dir, settings.output_dir)
    engine_client = EngineClientFactory.create(settings)
    return FileLifecycleManager(
        settings=settings,
        repository=repository,
        store=store,
        engine_client=engine_client,
        payment_gateway=PaymentGatewayFactory.create(settings),
        processor=build_processor(settings, repository, store, engine_client),
    )


def _media_type(extension: str) -> str:
    guessed, _ = mimetypes.guess_type(f"file{extension}")
    return guessed or "application/octet-stream"


def _read_chunks(handle: BinaryIO) -> Iterator[bytes]:
    with handle:
        while True:
            chunk = handle.read(DOWNLOAD_CHUNK_BYTES)
            if not chunk:
                break
            yield chunk
