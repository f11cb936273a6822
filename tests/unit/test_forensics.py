import numpy as np
import pytest

from sentinel.engine import forensics
from sentinel.engine.models import RiskLevel


class TestClassify:
    @pytest.mark.parametrize(
        ("intensity", "score", "level"),
        [
            (20.0, 45, RiskLevel.HIGH),
            (10.0, 72, RiskLevel.MEDIUM),
            (5.0, 96, RiskLevel.LOW),
        ],
    )
    def test_thresholds(self, intensity: float, score: int, level: RiskLevel) -> None:
        report = forensics.classify(intensity)
        assert report.score == score
        assert report.risk_level is level
        assert report.anomaly_intensity == intensity

    def test_boundaries_are_exclusive(self) -> None:
        assert forensics.classify(15.0).risk_level is RiskLevel.MEDIUM
        assert forensics.classify(8.0).risk_level is RiskLevel.LOW

    def test_risk_level_wire_values(self) -> None:
        assert [level.value for level in RiskLevel] == ["Low", "Medium", "High"]


class TestIntensityMap:
    def test_identical_images_give_zero_map(self, noisy_image: np.ndarray) -> None:
        intensity = forensics.intensity_map(noisy_image, noisy_image.copy())

        assert intensity.shape == noisy_image.shape[:2]
        assert intensity.dtype == np.uint8
        assert not intensity.any()

    def test_difference_is_amplified_and_saturates(self) -> None:
        original = np.full((4, 4, 3), 100, dtype=np.uint8)
        shifted = original.copy()
        shifted[0, 0] = 102
        shifted[1, 1] = 200

        intensity = forensics.intensity_map(original, shifted)

        assert intensity[0, 0] == 2 * forensics.DIFFERENCE_GAIN
        assert intensity[1, 1] == 255
        assert intensity[3, 3] == 0


class TestAnalyze:
    def test_uses_recompressed_difference(
        self, noisy_image: np.ndarray, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        # a uniform offset of 2 in every channel gives mean intensity 30
        monkeypatch.setattr(forensics, "recompress", lambda image: image - 2)
        image = np.full((16, 16, 3), 50, dtype=np.uint8)

        result = forensics.analyze(image)

        assert result.report.risk_level is RiskLevel.HIGH
        assert result.report.anomaly_intensity == pytest.approx(30.0)
        assert result.heatmap_image.shape == image.shape

    def test_flat_image_is_low_risk(self) -> None:
        image = np.full((64, 64, 3), 128, dtype=np.uint8)

        result = forensics.analyze(image)

        assert result.report.risk_level is RiskLevel.LOW
        assert result.report.score == forensics.LOW_RISK_SCORE

    def test_recompress_keeps_shape(self, noisy_image: np.ndarray) -> None:
        assert forensics.recompress(noisy_image).shape == noisy_image.shape
