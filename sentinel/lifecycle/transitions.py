"""Allowed lifecycle transitions and the guarded functions that apply them."""

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path

from sentinel.engine.models import Evidence, ExtractionEvidence
from sentinel.lifecycle.exceptions import IllegalTransitionError
from sentinel.lifecycle.models import FileRecord, FileState, PaymentState, ProcessingMode

ALLOWED_TRANSITIONS: dict[FileState, frozenset[FileState]] = {
    FileState.CREATED: frozenset({FileState.PROCESSED, FileState.FREE_VERIFIED}),
    FileState.PROCESSED: frozenset({FileState.PROCESSED, FileState.PAID}),
    FileState.PAID: frozenset(),
    FileState.FREE_VERIFIED: frozenset(),
}

# Payment state a record must be in before it may enter the target state.
REQUIRED_PAYMENT_STATE: dict[FileState, PaymentState] = {
    FileState.PROCESSED: PaymentState.UNPAID,
    FileState.PAID: PaymentState.UNPAID,
    FileState.FREE_VERIFIED: PaymentState.FREE_TIER,
}


def can_transition(record: FileRecord, target: FileState) -> bool:
    if target not in ALLOWED_TRANSITIONS[record.state]:
        return False
    required = REQUIRED_PAYMENT_STATE.get(target)
    return required is None or record.payment_state is required


def require_transition(record: FileRecord, target: FileState) -> None:
    """Raises IllegalTransitionError unless ``record`` may move to ``target``."""
    if not can_transition(record, target):
        raise IllegalTransitionError(
            f"File {record.id} cannot move from {record.state.value} "
            f"({record.payment_state.name}) to {target.value}"
        )


def mark_processed(
    record: FileRecord,
    *,
    mode: ProcessingMode,
    processed_path: Path,
    preview_path: Path,
    evidence: Evidence,
    payload: str | None,
) -> FileRecord:
    require_transition(record, FileState.PROCESSED)
    return replace(
        record,
        state=FileState.PROCESSED,
        algorithm=mode,
        processed_path=processed_path,
        preview_path=preview_path,
        algorithm_result=evidence,
        custom_payload=payload if payload is not None else record.custom_payload,
        updated_at=_now(),
    )


def mark_paid(record: FileRecord, order_id: str) -> FileRecord:
    require_transition(record, FileState.PAID)
    return replace(
        record,
        state=FileState.PAID,
        payment_state=PaymentState.PAID,
        payment_order_id=order_id,
        updated_at=_now(),
    )


def mark_free_verified(record: FileRecord, evidence: ExtractionEvidence) -> FileRecord:
    require_transition(record, FileState.FREE_VERIFIED)
    return replace(
        record,
        state=FileState.FREE_VERIFIED,
        algorithm_result=evidence,
        updated_at=_now(),
    )


def _now() -> datetime:
    return datetime.now(timezone.utc)
