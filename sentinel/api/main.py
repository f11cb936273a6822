"""
FastAPI app for the image engine service.

Endpoints:
- GET /health
- GET /stats
- GET /metrics
- POST /process
- POST /verify
"""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST

from sentinel.api.schemas import (
    ErrorResponse,
    HealthResponse,
    ProcessRequest,
    ProcessResponse,
    StatsResponse,
    VerifyRequest,
    VerifyResponse,
)
from sentinel.engine.exceptions import (
    CapacityExceededError,
    EngineError,
    ImageNotFoundError,
    ImageReadError,
    InvalidPayloadError,
    UnknownAlgorithmError,
)
from sentinel.engine.runner import EngineRunner

# Most specific classes first: ImageNotFoundError is an ImageReadError.
ERROR_STATUS: tuple[tuple[type[EngineError], int], ...] = (
    (InvalidPayloadError, 422),
    (CapacityExceededError, 422),
    (ImageNotFoundError, 404),
    (ImageReadError, 400),
    (UnknownAlgorithmError, 400),
)

app = FastAPI(
    title="Image Sentinel Engine",
    version="0.1.0",
    description="LSB watermarking and error-level analysis over files on the engine host.",
)

app.state.runner = EngineRunner()


def status_for(exc: EngineError) -> int:
    for error_cls, status_code in ERROR_STATUS:
        if isinstance(exc, error_cls):
            return status_code
    return 500


@app.exception_handler(EngineError)
async def engine_error_handler(_request: Request, exc: EngineError) -> JSONResponse:
    body = ErrorResponse(code=exc.code, error=str(exc))
    return JSONResponse(status_code=status_for(exc), content=body.to_wire())


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Simple health-check endpoint."""
    return HealthResponse(status="ok")


@app.get("/stats", response_model=StatsResponse, response_model_by_alias=True)
def stats() -> StatsResponse:
    runner: EngineRunner = app.state.runner
    return runner.stats()


@app.get("/metrics", response_class=Response)
def metrics() -> Response:
    """Prometheus text exposition of the runner's registry."""
    runner: EngineRunner = app.state.runner
    return Response(content=runner.metrics.export(), media_type=CONTENT_TYPE_LATEST)


@app.post(
    "/process",
    response_model=ProcessResponse,
    response_model_by_alias=True,
)
def process(req: ProcessRequest) -> ProcessResponse:
    """
    Run the watermark embedder or the forensic analyzer.

    Declared as a sync endpoint so the pixel work runs in the threadpool
    instead of blocking the event loop.
    """
    runner: EngineRunner = app.state.runner
    return runner.process(req)


@app.post("/verify", response_model=VerifyResponse, response_model_by_alias=True)
def verify(req: VerifyRequest) -> VerifyResponse:
    """Extract a watermark; an unmarked image is a successful `success=false` reply."""
    runner: EngineRunner = app.state.runner
    return runner.verify(req)


def run() -> None:
    """
    Convenience entrypoint, also exposed as the `sentinel-engine` console
    script in pyproject.toml.
    """
    import uvicorn

    from sentinel.config.settings import Settings
    from sentinel.logging.logger import Log

    settings = Settings()
    Log.configure(settings.log_level)
    uvicorn.run(
        "sentinel.api.main:app",
        host=settings.engine_host,
        port=settings.engine_port,
        reload=False,
    )
