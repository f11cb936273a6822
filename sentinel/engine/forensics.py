"""Error-level analysis (ELA).

The image is re-encoded as JPEG at a fixed quality and compared with itself.
Regions that were previously saved at a different quality, or pasted in from
another source, tend to recompress differently from their surroundings and
light up in the amplified difference map.

This is a heuristic signal, not proof of tampering: heavily textured or
already low-quality images can score as risky without any edit, and a careful
forger can re-save an image to flatten the error levels.
"""

import cv2
import numpy as np

from sentinel.engine.exceptions import ImageWriteError
from sentinel.engine.models import AnalysisResult, ForensicReport, RiskLevel

RECOMPRESS_QUALITY = 90
DIFFERENCE_GAIN = 15

HIGH_RISK_THRESHOLD = 15.0
MEDIUM_RISK_THRESHOLD = 8.0
HIGH_RISK_SCORE = 45
MEDIUM_RISK_SCORE = 72
LOW_RISK_SCORE = 96

ORIGINAL_WEIGHT = 0.6
HEATMAP_WEIGHT = 0.4


def recompress(image: np.ndarray, quality: int = RECOMPRESS_QUALITY) -> np.ndarray:
    """Round-trip ``image`` through an in-memory JPEG at ``quality``."""
    ok, encoded = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise ImageWriteError("JPEG recompression failed")
    decoded = cv2.imdecode(encoded, cv2.IMREAD_COLOR)
    if decoded is None:
        raise ImageWriteError("JPEG recompression produced an undecodable buffer")
    return decoded


def intensity_map(
    original: np.ndarray,
    recompressed: np.ndarray,
    gain: float = DIFFERENCE_GAIN,
) -> np.ndarray:
    """Amplified per-pixel absolute difference, reduced to one uint8 channel."""
    difference = cv2.absdiff(original, recompressed)
    amplified = cv2.convertScaleAbs(difference, alpha=gain)
    return cv2.cvtColor(amplified, cv2.COLOR_BGR2GRAY)


def classify(anomaly_intensity: float) -> ForensicReport:
    if anomaly_intensity > HIGH_RISK_THRESHOLD:
        score, level = HIGH_RISK_SCORE, RiskLevel.HIGH
    elif anomaly_intensity > MEDIUM_RISK_THRESHOLD:
        score, level = MEDIUM_RISK_SCORE, RiskLevel.MEDIUM
    else:
        score, level = LOW_RISK_SCORE, RiskLevel.LOW
    return ForensicReport(
        score=score,
        risk_level=level,
        anomaly_intensity=float(anomaly_intensity),
    )


def render_heatmap(image: np.ndarray, intensity: np.ndarray) -> np.ndarray:
    """Blend a JET pseudo-colour rendering of ``intensity`` over ``image``."""
    heatmap = cv2.applyColorMap(intensity, cv2.COLORMAP_JET)
    return cv2.addWeighted(image, ORIGINAL_WEIGHT, heatmap, HEATMAP_WEIGHT, 0.0)


def analyze(image: np.ndarray) -> AnalysisResult:
    """Run ELA on a BGR image and return the heatmap overlay with its verdict."""
    intensity = intensity_map(image, recompress(image))
    report = classify(float(np.mean(intensity)))
    return AnalysisResult(heatmap_image=render_heatmap(image, intensity), report=report)
