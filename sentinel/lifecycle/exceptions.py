from typing import ClassVar


class LifecycleError(Exception):
    """Base exception for file lifecycle failures."""

    code: ClassVar[str] = "lifecycle_error"


class RecordNotFoundError(LifecycleError):
    """Raised when no file record exists for an identifier."""

    code: ClassVar[str] = "not_found"


class ArtifactMissingError(LifecycleError):
    """Raised when an artifact is absent at read time, e.g. after a retention sweep."""

    code: ClassVar[str] = "artifact_missing"


class PaymentRequiredError(LifecycleError):
    """Raised when a gated artifact is requested before payment is confirmed."""

    code: ClassVar[str] = "payment_required"


class IllegalTransitionError(LifecycleError):
    """Raised when an operation is not allowed from the record's current state."""

    code: ClassVar[str] = "illegal_transition"


class InvalidUploadError(LifecycleError):
    """Raised when an upload is empty, too large, or not an image."""

    code: ClassVar[str] = "invalid_upload"


PUBLIC_MESSAGES: dict[str, str] = {
    "invalid_payload": "Watermark text must be 1-251 printable ASCII characters.",
    "capacity_exceeded": "The image is too small to hold this watermark text.",
    "image_read_failure": "The uploaded file could not be read as an image.",
    "image_not_found": "The image for this file is no longer available.",
    "image_write_failure": "The processed image could not be saved.",
    "unknown_algorithm": "The requested processing mode is not supported.",
    "upstream_unavailable": "The image engine is temporarily unavailable. Please retry later.",
    "engine_failure": "The image could not be processed.",
}

RETRYABLE_CODES = frozenset({"upstream_unavailable"})


class ProcessingError(LifecycleError):
    """Client-facing processing failure carrying only a stable code and message.

    Engine detail stays in the logs; ``__cause__`` keeps the original
    exception for callers that need it.
    """

    def __init__(self, code: str) -> None:
        self.code = code  # type: ignore[misc]
        super().__init__(PUBLIC_MESSAGES.get(code, PUBLIC_MESSAGES["engine_failure"]))

    @property
    def retryable(self) -> bool:
        return self.code in RETRYABLE_CODES
