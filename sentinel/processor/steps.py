from pathlib import Path

from sentinel.api.schemas import (
    ForensicsProcessResponse,
    ProcessRequest,
    ProcessResponse,
    WatermarkProcessResponse,
)
from sentinel.database.repositories.base import BaseFileRepository
from sentinel.engine.images import lossless_path, preview_path
from sentinel.engine.models import Evidence, ForensicEvidence, RiskLevel, WatermarkEvidence
from sentinel.engine_client.base import BaseEngineClient
from sentinel.lifecycle.exceptions import ArtifactMissingError
from sentinel.lifecycle.models import FileState, ProcessingMode
from sentinel.lifecycle.storage import ArtifactStore
from sentinel.lifecycle.transitions import mark_processed, require_transition
from sentinel.logging.logger import Log
from sentinel.processor.pipeline import PipelineStep, ProcessingContext


class LoadRecordStep(PipelineStep):
    def __init__(self, repository: BaseFileRepository) -> None:
        self._repository = repository

    def run(self, context: ProcessingContext) -> ProcessingContext:
        record = self._repository.get(context.file_id)
        require_transition(record, FileState.PROCESSED)
        if not ArtifactStore.exists(record.source_path):
            raise ArtifactMissingError(f"Upload for file {record.id} is gone")
        context.record = record
        return context


class ResolveRequestStep(PipelineStep):
    def __init__(self, store: ArtifactStore, default_payload: str) -> None:
        self._store = store
        self._default_payload = default_payload

    def run(self, context: ProcessingContext) -> ProcessingContext:
        if context.record is None:
            raise ValueError("ProcessingContext.record must be set before resolving the request")
        record = context.record
        context.output_path = self._store.new_processed_path(
            record.id, record.source_path.suffix.lower()
        )
        if context.mode is ProcessingMode.WATERMARK and context.payload is None:
            context.payload = record.custom_payload or self._default_payload
        return context


class RunEngineStep(PipelineStep):
    def __init__(self, engine_client: BaseEngineClient) -> None:
        self._engine_client = engine_client

    def run(self, context: ProcessingContext) -> ProcessingContext:
        if context.record is None or context.output_path is None:
            raise ValueError(
                "ProcessingContext.record and output_path must be set before the engine runs"
            )
        request = ProcessRequest(
            input_path=str(context.record.source_path),
            output_path=str(context.output_path),
            algorithm=context.mode.value,
            watermark_data=context.payload if context.mode is ProcessingMode.WATERMARK else None,
        )
        context.response = self._engine_client.process(request)
        context.evidence = _evidence_from(context.response)
        Log.info(f"Engine finished {context.mode.value} for file {context.file_id}")
        return context


class PersistResultStep(PipelineStep):
    """Moves the record to PROCESSED and drops artifacts of any earlier run."""

    def __init__(self, repository: BaseFileRepository, store: ArtifactStore) -> None:
        self._repository = repository
        self._store = store

    def run(self, context: ProcessingContext) -> ProcessingContext:
        if context.record is None or context.response is None or context.evidence is None:
            raise ValueError("ProcessingContext.response must be set before persist")
        previous = context.record
        updated = mark_processed(
            previous,
            mode=context.mode,
            processed_path=Path(context.response.output_path),
            preview_path=Path(context.response.preview_path),
            evidence=context.evidence,
            payload=context.payload if context.mode is ProcessingMode.WATERMARK else None,
        )
        self._repository.update(updated)
        context.record = updated

        stale = {previous.processed_path, previous.preview_path} - {
            updated.processed_path,
            updated.preview_path,
            None,
        }
        for path in stale:
            if path is None:
                continue
            try:
                self._store.remove(path)
            except OSError as exc:
                Log.warning(f"Could not remove stale artifact {path}: {exc}")
        Log.info(f"File {updated.id} processed", artifact=updated.processed_path)
        return context


class DiscardArtifactsStep(PipelineStep):
    """Failure step: removes whatever this run managed to write."""

    def __init__(self, store: ArtifactStore) -> None:
        self._store = store

    def run(self, context: ProcessingContext) -> ProcessingContext:
        persisted = set(context.record.artifact_paths()) if context.record else set()
        for path in _run_artifacts(context) - persisted:
            if not path.exists():
                continue
            try:
                self._store.remove(path)
            except OSError as exc:
                Log.warning(f"Could not discard artifact {path}: {exc}")
        Log.error(f"Processing failed for file {context.file_id}: {context.error_message}")
        return context


def _run_artifacts(context: ProcessingContext) -> set[Path]:
    paths: set[Path] = set()
    if context.output_path is not None:
        for output in (context.output_path, lossless_path(context.output_path)):
            paths.update({output, preview_path(output)})
    if context.response is not None:
        paths.update({Path(context.response.output_path), Path(context.response.preview_path)})
    return paths


def _evidence_from(response: ProcessResponse) -> Evidence:
    if isinstance(response, WatermarkProcessResponse):
        return WatermarkEvidence(
            embedded_text=response.embedded_text,
            algorithm=response.algorithm,
        )
    if isinstance(response, ForensicsProcessResponse):
        return ForensicEvidence(
            score=response.score,
            risk_level=RiskLevel(response.risk_level),
            anomaly_intensity=response.anomaly_intensity,
        )
    raise TypeError(f"Unexpected engine response: {type(response).__name__}")
