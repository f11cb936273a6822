"""
Pydantic schemas for the engine service wire format.

Field names are camelCase on the wire (``inputPath``, ``watermarkData``...)
and snake_case in Python; both spellings are accepted when parsing.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, object]:
        return self.model_dump(by_alias=True, mode="json")


class ProcessRequest(WireModel):
    """
    Request payload for POST /process.

    - input_path: carrier image on the engine's filesystem
    - output_path: where the full-resolution result should be written; the
      watermark path may change its suffix to keep the container lossless
    - algorithm: "watermark" or "forensics"
    - watermark_data: payload text, required for "watermark"
    """

    input_path: str
    output_path: str
    algorithm: Literal["watermark", "forensics"]
    watermark_data: Optional[str] = None


class WatermarkProcessResponse(WireModel):
    success: Literal[True] = True
    output_path: str
    preview_path: str
    embedded_text: str
    algorithm: str


class ForensicsProcessResponse(WireModel):
    success: Literal[True] = True
    output_path: str
    preview_path: str
    score: int
    risk_level: str
    anomaly_intensity: float


ProcessResponse = Union[WatermarkProcessResponse, ForensicsProcessResponse]


class VerifyRequest(WireModel):
    """Request payload for POST /verify."""

    input_path: str


class VerifyResponse(WireModel):
    """
    Response payload for POST /verify.

    - success: a watermark carrying our header was found
    - extracted_text: the payload with the header stripped
    - confidence_score: 0.99 found, 0.1 foreign bits, 0.0 nothing readable
    """

    success: bool
    extracted_text: Optional[str] = None
    confidence_score: float


class ErrorResponse(WireModel):
    success: Literal[False] = False
    code: str
    error: str


class HealthResponse(WireModel):
    """Simple health check response."""

    status: str


class StatsResponse(WireModel):
    total_requests: int
    failed_requests: int
    processed_images: int
    watermark_calls: int
    forensics_calls: int
    verify_calls: int
    active_requests: int
