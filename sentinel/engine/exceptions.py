from typing import ClassVar


class EngineError(Exception):
    """Base exception for watermark and forensic engine failures."""

    code: ClassVar[str] = "engine_failure"


class InvalidPayloadError(EngineError):
    """Raised when a watermark payload is empty, too long, or not printable ASCII."""

    code: ClassVar[str] = "invalid_payload"


class CapacityExceededError(EngineError):
    """Raised when the encoded payload needs more bits than the carrier has pixels."""

    code: ClassVar[str] = "capacity_exceeded"


class ImageReadError(EngineError):
    """Raised when a carrier image cannot be read or decoded."""

    code: ClassVar[str] = "image_read_failure"


class ImageNotFoundError(ImageReadError):
    """Raised when the carrier image does not exist on disk."""

    code: ClassVar[str] = "image_not_found"


class ImageWriteError(EngineError):
    """Raised when an output artifact cannot be encoded or written."""

    code: ClassVar[str] = "image_write_failure"


class UnknownAlgorithmError(EngineError):
    """Raised when a processing request names an unsupported algorithm."""

    code: ClassVar[str] = "unknown_algorithm"


ENGINE_ERRORS: dict[str, type[EngineError]] = {
    cls.code: cls
    for cls in (
        EngineError,
        InvalidPayloadError,
        CapacityExceededError,
        ImageReadError,
        ImageNotFoundError,
        ImageWriteError,
        UnknownAlgorithmError,
    )
}
