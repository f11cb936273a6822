"""Least-significant-bit watermarking on a single colour channel.

One payload bit is stored per pixel in the LSB of the blue plane (OpenCV
images are BGR), walking pixels in row-major order. All other channels and
bit planes are left untouched, so the marked image is visually identical to
the source. Any lossy re-encoding destroys the payload; callers must store
the marked image in a lossless container.
"""

import numpy as np

from sentinel.engine import bitstream
from sentinel.engine.exceptions import CapacityExceededError, InvalidPayloadError
from sentinel.engine.images import render_banner
from sentinel.engine.models import EmbedResult, ExtractionEvidence, WatermarkEvidence

MAGIC_HEADER = "SNTL"
CARRIER_CHANNEL = 0
ALGORITHM_LABEL = "lsb-blue-v1"

FOUND_CONFIDENCE = 0.99
FOREIGN_CONFIDENCE = 0.1
MAX_PAYLOAD_LENGTH = bitstream.MAX_TEXT_LENGTH - len(MAGIC_HEADER)


def capacity(image: np.ndarray) -> int:
    """Carrier capacity in bits: one per pixel."""
    height, width = image.shape[:2]
    return height * width


def encode_payload(payload: str) -> np.ndarray:
    """Prefix the magic header and encode; validates the payload on the way.

    Raises:
        InvalidPayloadError: if the payload is empty, longer than
            MAX_PAYLOAD_LENGTH, or not printable ASCII.
    """
    if not payload:
        raise InvalidPayloadError("Payload must not be empty")
    if len(payload) > MAX_PAYLOAD_LENGTH:
        raise InvalidPayloadError(
            f"Payload is {len(payload)} characters, maximum is {MAX_PAYLOAD_LENGTH}"
        )
    return bitstream.encode(MAGIC_HEADER + payload)


def embed(image: np.ndarray, payload: str) -> EmbedResult:
    """Hide ``payload`` in ``image`` and render a captioned preview.

    Raises:
        InvalidPayloadError: if the payload is empty, too long, or not printable.
        CapacityExceededError: if the carrier has fewer pixels than payload bits.
    """
    _require_colour(image)
    bits = encode_payload(payload)
    available = capacity(image)
    if bits.size > available:
        raise CapacityExceededError(
            f"Payload needs {bits.size} bits but the carrier only has {available} pixels"
        )

    marked = image.copy()
    plane = marked[:, :, CARRIER_CHANNEL].ravel()
    plane[: bits.size] = (plane[: bits.size] & 0xFE) | bits
    marked[:, :, CARRIER_CHANNEL] = plane.reshape(image.shape[:2])

    preview = render_banner(marked, f"WATERMARKED: {payload}")
    evidence = WatermarkEvidence(embedded_text=payload, algorithm=ALGORITHM_LABEL)
    return EmbedResult(marked_image=marked, preview_image=preview, evidence=evidence)


def extract(image: np.ndarray) -> ExtractionEvidence:
    """Read a watermark back out of ``image``.

    Never raises for unmarked carriers: absent or foreign payloads are
    reported through ``found`` and ``confidence``.
    """
    _require_colour(image)
    bits = image[:, :, CARRIER_CHANNEL].ravel() & 1

    decoded = bitstream.decode(bits)
    if decoded.confidence == bitstream.NO_DATA_CONFIDENCE:
        return ExtractionEvidence(found=False, confidence=bitstream.NO_DATA_CONFIDENCE)

    if not decoded.text.startswith(MAGIC_HEADER):
        return ExtractionEvidence(found=False, confidence=FOREIGN_CONFIDENCE)

    return ExtractionEvidence(
        found=True,
        confidence=FOUND_CONFIDENCE,
        extracted_text=decoded.text[len(MAGIC_HEADER) :],
    )


def _require_colour(image: np.ndarray) -> None:
    if image.ndim != 3 or image.shape[2] <= CARRIER_CHANNEL:
        raise ValueError(f"Expected a BGR image, got array of shape {image.shape}")
