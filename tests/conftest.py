from collections.abc import Callable
from pathlib import Path

import cv2
import numpy as np
import pytest

from sentinel.config.settings import Settings


def _make_image(height: int = 64, width: int = 64, seed: int = 7) -> np.ndarray:
    """Deterministic noisy BGR image."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


def _encode(image: np.ndarray, extension: str = ".png") -> bytes:
    ok, encoded = cv2.imencode(extension, image)
    assert ok
    return encoded.tobytes()


@pytest.fixture()
def image_factory() -> Callable[..., np.ndarray]:
    return _make_image


@pytest.fixture()
def encode_image() -> Callable[..., bytes]:
    return _encode


@pytest.fixture()
def noisy_image() -> np.ndarray:
    return _make_image()


@pytest.fixture()
def png_bytes(noisy_image: np.ndarray) -> bytes:
    return _encode(noisy_image)


@pytest.fixture()
def png_on_disk(tmp_path: Path, png_bytes: bytes) -> Path:
    path = tmp_path / "carrier.png"
    path.write_bytes(png_bytes)
    return path


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment and pointing at tmp_path."""
    return Settings(
        _env_file=None,
        repository_backend="memory",
        engine_mode="local",
        upload_dir=tmp_path / "uploads",
        output_dir=tmp_path / "output",
        payment_secret="test-secret",
    )
