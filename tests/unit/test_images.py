from collections.abc import Callable
from pathlib import Path

import numpy as np
import pytest

from sentinel.engine import images
from sentinel.engine.exceptions import ImageNotFoundError, ImageReadError, ImageWriteError


class TestReadWrite:
    def test_png_round_trip_is_exact(self, tmp_path: Path, noisy_image: np.ndarray) -> None:
        path = images.write_image(tmp_path / "nested" / "out.png", noisy_image)

        assert path.exists()
        assert np.array_equal(images.load_image(path), noisy_image)

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ImageNotFoundError):
            images.load_image(tmp_path / "nope.png")

    def test_not_an_image(self, tmp_path: Path) -> None:
        path = tmp_path / "fake.png"
        path.write_bytes(b"definitely not a png")

        with pytest.raises(ImageReadError, match="Cannot decode"):
            images.load_image(path)

    def test_empty_bytes(self) -> None:
        with pytest.raises(ImageReadError):
            images.decode_image(b"")

    def test_grayscale_promoted_to_bgr(
        self, encode_image: Callable[..., bytes]
    ) -> None:
        gray = np.full((8, 8), 90, dtype=np.uint8)
        decoded = images.decode_image(encode_image(gray))
        assert decoded.shape == (8, 8, 3)

    def test_unknown_extension_fails_to_write(self, tmp_path: Path, noisy_image: np.ndarray) -> None:
        with pytest.raises(ImageWriteError):
            images.write_image(tmp_path / "out.unknown", noisy_image)


class TestPaths:
    @pytest.mark.parametrize("name", ["a.png", "a.BMP", "a.tif", "a.tiff"])
    def test_lossless_kept(self, name: str) -> None:
        assert images.lossless_path(Path(name)) == Path(name)

    @pytest.mark.parametrize("name", ["a.jpg", "a.jpeg", "a.webp"])
    def test_lossy_replaced_with_png(self, name: str) -> None:
        assert images.lossless_path(Path(name)) == Path("a.png")

    def test_preview_path(self) -> None:
        assert images.preview_path(Path("/out/processed_x.jpg")) == Path(
            "/out/processed_x_preview.png"
        )


class TestBanner:
    def test_banner_darkens_bottom_only(self) -> None:
        image = np.full((80, 200, 3), 200, dtype=np.uint8)

        preview = images.render_banner(image, "x")

        assert np.array_equal(preview[:60], image[:60])
        assert preview[-1, -20:].max() < 200
        assert np.array_equal(image, np.full((80, 200, 3), 200, dtype=np.uint8))

    def test_long_caption_fits_tiny_image(self) -> None:
        image = np.zeros((10, 10, 3), dtype=np.uint8)
        preview = images.render_banner(image, "WATERMARKED: " + "x" * 200)
        assert preview.shape == image.shape
