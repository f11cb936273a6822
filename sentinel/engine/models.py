from dataclasses import dataclass
from enum import Enum

import numpy as np


class RiskLevel(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


@dataclass(frozen=True)
class WatermarkEvidence:
    """Result of a successful LSB embed."""

    embedded_text: str
    algorithm: str


@dataclass(frozen=True)
class ForensicEvidence:
    """Error-level analysis verdict derived from the mean amplified difference."""

    score: int
    risk_level: RiskLevel
    anomaly_intensity: float


@dataclass(frozen=True)
class ExtractionEvidence:
    """Outcome of reading a watermark back out of a carrier.

    ``confidence`` is a coarse signal: 0.99 when our header was found, 0.1 when
    bits were readable but foreign, 0.0 when no payload could be read.
    """

    found: bool
    confidence: float
    extracted_text: str | None = None


Evidence = WatermarkEvidence | ForensicEvidence | ExtractionEvidence

ForensicReport = ForensicEvidence


@dataclass(frozen=True)
class EmbedResult:
    marked_image: np.ndarray
    preview_image: np.ndarray
    evidence: WatermarkEvidence


@dataclass(frozen=True)
class AnalysisResult:
    heatmap_image: np.ndarray
    report: ForensicReport
