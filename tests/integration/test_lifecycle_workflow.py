from collections.abc import Generator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from sentinel.config.settings import Settings
from sentinel.database.repositories.memory_file_repository import InMemoryFileRepository
from sentinel.engine import watermark
from sentinel.engine.images import decode_image, load_image
from sentinel.lifecycle.exceptions import PaymentRequiredError
from sentinel.lifecycle.manager import FileLifecycleManager, build_manager
from sentinel.lifecycle.models import FileState, PaymentState
from sentinel.payment.example_gateway import ExampleGatewayAdapter

pytestmark = pytest.mark.integration


@pytest.fixture
def manager(settings: Settings) -> Generator[FileLifecycleManager, None, None]:
    repository = InMemoryFileRepository()
    repository.open()
    built = build_manager(settings, repository)
    try:
        yield built
    finally:
        built.close()
        repository.close()


def _notify(settings: Settings, order_id: str) -> dict[str, str]:
    gateway = ExampleGatewayAdapter(
        secret=settings.payment_secret,
        checkout_url="unused",
        return_url="unused",
        notify_url="unused",
    )
    payload = {"out_trade_no": order_id, "trade_status": "TRADE_SUCCESS"}
    payload["sign"] = gateway.sign(payload)
    return payload


class TestWatermarkWorkflow:
    def test_upload_process_pay_download(
        self, manager: FileLifecycleManager, settings: Settings, png_bytes: bytes
    ) -> None:
        record = manager.upload(png_bytes, "sunset.jpg", custom_payload="Owner: Jane")
        processed = manager.process(record.id, "watermark")

        assert processed.processed_path is not None
        assert processed.processed_path.suffix == ".png"
        with pytest.raises(PaymentRequiredError):
            manager.download(record.id)

        initiation = manager.initiate_payment(record.id)
        assert manager.handle_payment_callback(_notify(settings, initiation.order_id)) == "success"
        assert manager.handle_payment_callback(_notify(settings, initiation.order_id)) == "success"
        assert manager.get(record.id).payment_state is PaymentState.PAID

        download = manager.download(record.id)
        assert download.filename == "Sentinel_sunset.png"
        marked = decode_image(b"".join(download.chunks))
        evidence = watermark.extract(marked)
        assert evidence.found is True
        assert evidence.extracted_text == "Owner: Jane"

    def test_verify_free_on_marked_artifact(
        self, manager: FileLifecycleManager, png_bytes: bytes
    ) -> None:
        record = manager.upload(png_bytes, "cat.png")
        manager.process(record.id, "watermark", payload="Studio 9")

        evidence = manager.verify_free(record.id)

        assert evidence.found is True
        assert evidence.extracted_text == "Studio 9"
        assert evidence.confidence == pytest.approx(0.99)

    def test_preview_is_a_readable_image(
        self, manager: FileLifecycleManager, png_bytes: bytes
    ) -> None:
        record = manager.upload(png_bytes, "cat.png")
        manager.process(record.id, "watermark")

        preview = load_image(manager.preview(record.id))

        assert preview.shape == (64, 64, 3)


class TestForensicsWorkflow:
    def test_forensics_report_persisted(
        self, manager: FileLifecycleManager, png_bytes: bytes
    ) -> None:
        record = manager.upload(png_bytes, "scan.png")

        processed = manager.process(record.id, "forensics")

        assert processed.state is FileState.PROCESSED
        assert processed.algorithm_result is not None
        assert processed.preview_path is not None and processed.preview_path.exists()


class TestFreeTierWorkflow:
    def test_unmarked_upload_verifies_as_not_found(
        self, manager: FileLifecycleManager, png_bytes: bytes
    ) -> None:
        record = manager.upload(png_bytes, "cat.png", free_tier=True)

        evidence = manager.verify_free(record.id)

        assert evidence.found is False
        assert evidence.confidence < 0.2
        assert manager.get(record.id).state is FileState.FREE_VERIFIED


class TestRetention:
    def test_sweep_clears_disk_and_records(
        self, manager: FileLifecycleManager, settings: Settings, png_bytes: bytes
    ) -> None:
        record = manager.upload(png_bytes, "cat.png")
        manager.process(record.id, "watermark")

        report = manager.sweep(now=datetime.now(timezone.utc) + timedelta(hours=25))

        assert report.removed == 1
        assert manager.count() == 0
        assert list(Path(settings.upload_dir).iterdir()) == []
        assert list(Path(settings.output_dir).iterdir()) == []
