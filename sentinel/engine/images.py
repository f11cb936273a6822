"""Image I/O and preview rendering on top of OpenCV."""

from pathlib import Path

import cv2
import numpy as np

from sentinel.engine.exceptions import ImageNotFoundError, ImageReadError, ImageWriteError

LOSSLESS_EXTENSIONS = frozenset({".png", ".bmp", ".tif", ".tiff"})
LOSSLESS_FALLBACK_EXTENSION = ".png"

BANNER_ALPHA = 0.55
_FONT = cv2.FONT_HERSHEY_SIMPLEX
_MIN_FONT_SCALE = 0.3


def decode_image(data: bytes, source: str = "<bytes>") -> np.ndarray:
    """Decode encoded image bytes into a 3-channel BGR uint8 array.

    Grayscale inputs are promoted and alpha channels dropped.

    Raises:
        ImageReadError: if the bytes are not a decodable image.
    """
    buffer = np.frombuffer(data, dtype=np.uint8)
    image = cv2.imdecode(buffer, cv2.IMREAD_COLOR) if buffer.size else None
    if image is None:
        raise ImageReadError(f"Cannot decode image: {source}")
    return image


def load_image(path: Path) -> np.ndarray:
    """Read an image file from disk.

    Raises:
        ImageNotFoundError: if the file does not exist.
        ImageReadError: if it cannot be read or decoded.
    """
    try:
        data = path.read_bytes()
    except FileNotFoundError as exc:
        raise ImageNotFoundError(f"Image not found: {path}") from exc
    except OSError as exc:
        raise ImageReadError(f"Cannot read image {path}: {exc}") from exc
    return decode_image(data, source=str(path))


def write_image(path: Path, image: np.ndarray) -> Path:
    """Encode ``image`` using the container implied by the path suffix.

    Raises:
        ImageWriteError: if encoding fails or the file cannot be written.
    """
    try:
        ok, encoded = cv2.imencode(path.suffix.lower(), image)
    except cv2.error as exc:
        raise ImageWriteError(f"Cannot encode image as '{path.suffix}': {exc}") from exc
    if not ok:
        raise ImageWriteError(f"Cannot encode image as '{path.suffix}'")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(encoded.tobytes())
    except OSError as exc:
        raise ImageWriteError(f"Cannot write image {path}: {exc}") from exc
    return path


def is_lossless(path: Path) -> bool:
    return path.suffix.lower() in LOSSLESS_EXTENSIONS


def lossless_path(path: Path) -> Path:
    """Return ``path`` unchanged if its container is lossless, else a .png sibling."""
    if is_lossless(path):
        return path
    return path.with_suffix(LOSSLESS_FALLBACK_EXTENSION)


def preview_path(output_path: Path) -> Path:
    """Preview artifacts live next to the output as ``<stem>_preview.png``."""
    return output_path.with_name(f"{output_path.stem}_preview{LOSSLESS_FALLBACK_EXTENSION}")


def render_banner(image: np.ndarray, caption: str) -> np.ndarray:
    """Return a copy of ``image`` with a translucent bottom banner and caption."""
    preview = image.copy()
    height, width = preview.shape[:2]
    banner_height = min(height, max(16, height // 8))

    band = preview[height - banner_height :, :]
    shade = np.zeros_like(band)
    preview[height - banner_height :, :] = cv2.addWeighted(
        shade, BANNER_ALPHA, band, 1.0 - BANNER_ALPHA, 0.0
    )

    margin = max(2, width // 50)
    scale, text = _fit_caption(caption, width - 2 * margin, banner_height)
    thickness = 1 if scale < 0.8 else 2
    (_, text_height), _ = cv2.getTextSize(text, _FONT, scale, thickness)
    baseline_y = height - (banner_height - text_height) // 2
    cv2.putText(
        preview,
        text,
        (margin, baseline_y),
        _FONT,
        scale,
        (255, 255, 255),
        thickness,
        cv2.LINE_AA,
    )
    return preview


def _fit_caption(caption: str, max_width: int, banner_height: int) -> tuple[float, str]:
    scale = max(_MIN_FONT_SCALE, banner_height / 40)
    while scale > _MIN_FONT_SCALE and _text_width(caption, scale) > max_width:
        scale = max(_MIN_FONT_SCALE, scale - 0.1)

    text = caption
    while len(text) > 4 and _text_width(text, scale) > max_width:
        text = text[:-4] + "..."
    return scale, text


def _text_width(text: str, scale: float) -> int:
    (width, _), _ = cv2.getTextSize(text, _FONT, scale, 1)
    return width
