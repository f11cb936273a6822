from typing import Any

from sentinel.engine.models import (
    Evidence,
    ExtractionEvidence,
    ForensicEvidence,
    RiskLevel,
    WatermarkEvidence,
)


class EvidenceSerializer:
    """Converts tagged evidence variants to and from JSON-ready dicts."""

    def to_payload(self, evidence: Evidence) -> dict[str, Any]:
        """Transform evidence into a dict tagged with its ``type``."""
        if isinstance(evidence, WatermarkEvidence):
            return {
                "type": "watermark",
                "embeddedText": evidence.embedded_text,
                "algorithm": evidence.algorithm,
            }
        if isinstance(evidence, ForensicEvidence):
            return {
                "type": "forensics",
                "score": evidence.score,
                "riskLevel": evidence.risk_level.value,
                "anomalyIntensity": evidence.anomaly_intensity,
            }
        if isinstance(evidence, ExtractionEvidence):
            return {
                "type": "extraction",
                "found": evidence.found,
                "confidence": evidence.confidence,
                "extractedText": evidence.extracted_text,
            }
        raise TypeError(f"Unsupported evidence type: {type(evidence).__name__}")

    def from_payload(self, payload: dict[str, Any]) -> Evidence:
        """Rebuild evidence from a dict produced by :meth:`to_payload`.

        Raises:
            ValueError: if the ``type`` tag is missing or unknown.
        """
        kind = payload.get("type")
        if kind == "watermark":
            return WatermarkEvidence(
                embedded_text=payload["embeddedText"],
                algorithm=payload["algorithm"],
            )
        if kind == "forensics":
            return ForensicEvidence(
                score=int(payload["score"]),
                risk_level=RiskLevel(payload["riskLevel"]),
                anomaly_intensity=float(payload["anomalyIntensity"]),
            )
        if kind == "extraction":
            return ExtractionEvidence(
                found=bool(payload["found"]),
                confidence=float(payload["confidence"]),
                extracted_text=payload.get("extractedText"),
            )
        raise ValueError(f"Unknown evidence type '{kind}'")
