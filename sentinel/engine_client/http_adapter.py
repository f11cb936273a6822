from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from sentinel.api.schemas import (
    ErrorResponse,
    ForensicsProcessResponse,
    ProcessRequest,
    ProcessResponse,
    VerifyRequest,
    VerifyResponse,
    WatermarkProcessResponse,
)
from sentinel.engine.exceptions import ENGINE_ERRORS, EngineError
from sentinel.engine_client.base import BaseEngineClient
from sentinel.engine_client.exceptions import UpstreamUnavailableError
from sentinel.logging.logger import Log

UNAVAILABLE_STATUSES = frozenset({502, 503, 504})

ModelT = TypeVar("ModelT", bound=BaseModel)


class HttpEngineClient(BaseEngineClient):
    """Engine client that talks to the engine service over HTTP."""

    def __init__(
        self,
        *,
        base_url: str,
        timeout_seconds: float,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=transport,
        )

    def process(self, request: ProcessRequest) -> ProcessResponse:
        response_model: type[WatermarkProcessResponse] | type[ForensicsProcessResponse] = (
            WatermarkProcessResponse
            if request.algorithm == "watermark"
            else ForensicsProcessResponse
        )
        return self._post("/process", request.to_wire(), response_model)

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        return self._post("/verify", request.to_wire(), VerifyResponse)

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, body: dict[str, object], model: type[ModelT]) -> ModelT:
        try:
            response = self._client.post(path, json=body)
        except httpx.TransportError as exc:
            raise UpstreamUnavailableError(f"Engine service unreachable: {exc}") from exc

        if response.status_code in UNAVAILABLE_STATUSES:
            raise UpstreamUnavailableError(
                f"Engine service unavailable: HTTP {response.status_code}"
            )
        if response.is_error:
            raise self._engine_error(response)

        try:
            return model.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise EngineError(f"Malformed engine response from {path}: {exc}") from exc

    @staticmethod
    def _engine_error(response: httpx.Response) -> EngineError:
        try:
            error = ErrorResponse.model_validate(response.json())
        except (ValueError, ValidationError):
            Log.warning(f"Engine returned HTTP {response.status_code} without an error body")
            return EngineError(f"Engine returned HTTP {response.status_code}")
        error_cls = ENGINE_ERRORS.get(error.code, EngineError)
        return error_cls(error.error)
