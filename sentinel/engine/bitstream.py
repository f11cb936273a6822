"""Length-prefixed bit encoding for watermark payloads.

Layout: one length byte ``L`` (1-255) followed by ``L`` payload bytes, all
most-significant-bit first. Encoding is strict and rejects anything outside
printable ASCII; decoding never fails and replaces unprintable bytes with
``?``.
"""

from dataclasses import dataclass

import numpy as np

from sentinel.engine.exceptions import InvalidPayloadError

LENGTH_BITS = 8
MAX_TEXT_LENGTH = 255
PRINTABLE_MIN = 32
PRINTABLE_MAX = 126
REPLACEMENT_CHAR = "?"

FULL_CONFIDENCE = 1.0
NO_DATA_CONFIDENCE = 0.0


@dataclass(frozen=True)
class DecodedPayload:
    """Text recovered from a bit sequence plus how much of it was readable."""

    text: str
    confidence: float


def required_bits(text_length: int) -> int:
    """Number of carrier bits needed for a text of ``text_length`` characters."""
    return LENGTH_BITS + 8 * text_length


def is_printable(char: str) -> bool:
    return PRINTABLE_MIN <= ord(char) <= PRINTABLE_MAX


def encode(text: str) -> np.ndarray:
    """Encode text as a flat uint8 array of 0/1 bits.

    Raises:
        InvalidPayloadError: if the text is empty, longer than 255 characters,
            or contains a character outside ASCII 32-126.
    """
    if not text:
        raise InvalidPayloadError("Payload must not be empty")
    if len(text) > MAX_TEXT_LENGTH:
        raise InvalidPayloadError(
            f"Payload is {len(text)} characters, maximum is {MAX_TEXT_LENGTH}"
        )
    for position, char in enumerate(text):
        if not is_printable(char):
            raise InvalidPayloadError(
                f"Payload contains non-printable character {ord(char):#04x} "
                f"at position {position}"
            )

    raw = bytes([len(text)]) + text.encode("ascii")
    return np.unpackbits(np.frombuffer(raw, dtype=np.uint8))


def decode(bits: np.ndarray) -> DecodedPayload:
    """Decode a bit sequence produced by :func:`encode`.

    A zero length byte or a declared length that runs past the available bits
    means there is no payload; that is reported as empty text with zero
    confidence rather than as an error.
    """
    bits = np.asarray(bits, dtype=np.uint8).ravel()
    if bits.size < LENGTH_BITS:
        return DecodedPayload(text="", confidence=NO_DATA_CONFIDENCE)

    length = int(np.packbits(bits[:LENGTH_BITS])[0])
    if length == 0 or required_bits(length) > bits.size:
        return DecodedPayload(text="", confidence=NO_DATA_CONFIDENCE)

    body = np.packbits(bits[LENGTH_BITS : required_bits(length)])
    text = "".join(
        chr(byte) if PRINTABLE_MIN <= byte <= PRINTABLE_MAX else REPLACEMENT_CHAR
        for byte in body.tolist()
    )
    return DecodedPayload(text=text, confidence=FULL_CONFIDENCE)
