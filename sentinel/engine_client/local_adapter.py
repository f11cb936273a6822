from sentinel.api.schemas import ProcessRequest, ProcessResponse, VerifyRequest, VerifyResponse
from sentinel.engine.runner import EngineRunner
from sentinel.engine_client.base import BaseEngineClient


class LocalEngineClient(BaseEngineClient):
    """Runs the engines in-process. Useful for single-host deployments and tests."""

    def __init__(self, runner: EngineRunner | None = None) -> None:
        self._runner = runner if runner is not None else EngineRunner()

    def process(self, request: ProcessRequest) -> ProcessResponse:
        return self._runner.process(request)

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        return self._runner.verify(request)
