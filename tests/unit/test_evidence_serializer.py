import pytest

from sentinel.engine.models import (
    ExtractionEvidence,
    ForensicEvidence,
    RiskLevel,
    WatermarkEvidence,
)
from sentinel.processor.evidence_serializer import EvidenceSerializer


class TestEvidenceSerializer:
    def test_watermark_payload(self) -> None:
        payload = EvidenceSerializer().to_payload(
            WatermarkEvidence(embedded_text="Hi", algorithm="lsb-blue-v1")
        )
        assert payload == {"type": "watermark", "embeddedText": "Hi", "algorithm": "lsb-blue-v1"}

    def test_forensics_payload(self) -> None:
        payload = EvidenceSerializer().to_payload(
            ForensicEvidence(score=45, risk_level=RiskLevel.HIGH, anomaly_intensity=17.25)
        )
        assert payload == {
            "type": "forensics",
            "score": 45,
            "riskLevel": "High",
            "anomalyIntensity": 17.25,
        }

    @pytest.mark.parametrize(
        "evidence",
        [
            WatermarkEvidence(embedded_text="Hi", algorithm="lsb-blue-v1"),
            ForensicEvidence(score=96, risk_level=RiskLevel.LOW, anomaly_intensity=1.5),
            ExtractionEvidence(found=False, confidence=0.1),
            ExtractionEvidence(found=True, confidence=0.99, extracted_text="Hi"),
        ],
    )
    def test_payload_rebuilds_same_evidence(self, evidence: object) -> None:
        serializer = EvidenceSerializer()
        assert serializer.from_payload(serializer.to_payload(evidence)) == evidence  # type: ignore[arg-type]

    def test_unknown_type_tag(self) -> None:
        with pytest.raises(ValueError, match="Unknown evidence type 'blur'"):
            EvidenceSerializer().from_payload({"type": "blur"})

    def test_unsupported_object(self) -> None:
        with pytest.raises(TypeError):
            EvidenceSerializer().to_payload("not evidence")  # type: ignore[arg-type]
