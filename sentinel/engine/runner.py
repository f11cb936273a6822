import time
from pathlib import Path

from sentinel.api.schemas import (
    ForensicsProcessResponse,
    ProcessRequest,
    ProcessResponse,
    StatsResponse,
    VerifyRequest,
    VerifyResponse,
    WatermarkProcessResponse,
)
from sentinel.engine import forensics, watermark
from sentinel.engine.exceptions import EngineError, InvalidPayloadError, UnknownAlgorithmError
from sentinel.engine.images import (
    load_image,
    lossless_path,
    preview_path,
    render_banner,
    write_image,
)
from sentinel.engine.metrics import COUNTERS, EngineMetrics
from sentinel.logging.logger import Log


class EngineRunner:
    """Runs engine algorithms against files: read carrier, compute, write artifacts."""

    def __init__(self) -> None:
        self.metrics = EngineMetrics()

    def stats(self) -> StatsResponse:
        values = {name: self.metrics.value(name) for name in COUNTERS}
        return StatsResponse(**values, active_requests=self.metrics.value("active_requests"))

    def process(self, request: ProcessRequest) -> ProcessResponse:
        """Dispatch a processing request to the watermark or forensic engine.

        Raises:
            EngineError: any typed engine failure; counted as a failed request.
        """
        handlers = {
            "watermark": self._run_watermark,
            "forensics": self._run_forensics,
        }
        self._count("total_requests")
        Log.info(f"Processing {request.algorithm} request", input=request.input_path)
        started = time.perf_counter()
        with self.metrics.track():
            try:
                handler = handlers.get(request.algorithm)
                if handler is None:
                    raise UnknownAlgorithmError(f"Unknown algorithm '{request.algorithm}'")
                response = handler(request)
            except EngineError as exc:
                self._count("failed_requests")
                Log.error(f"Processing failed: {exc}", code=exc.code)
                raise

        self._count("processed_images")
        elapsed_ms = int((time.perf_counter() - started) * 1000)
        Log.info(f"Request completed in {elapsed_ms}ms", algorithm=request.algorithm)
        return response

    def verify(self, request: VerifyRequest) -> VerifyResponse:
        """Extract a watermark from ``request.input_path`` without side effects."""
        self._count("total_requests")
        self._count("verify_calls")
        with self.metrics.track():
            try:
                evidence = watermark.extract(load_image(Path(request.input_path)))
            except EngineError as exc:
                self._count("failed_requests")
                Log.error(f"Verification failed: {exc}", code=exc.code)
                raise
        Log.info(
            "Verification finished",
            found=evidence.found,
            confidence=evidence.confidence,
        )
        return VerifyResponse(
            success=evidence.found,
            extracted_text=evidence.extracted_text,
            confidence_score=evidence.confidence,
        )

    def _run_watermark(self, request: ProcessRequest) -> WatermarkProcessResponse:
        self._count("watermark_calls")
        if request.watermark_data is None:
            raise InvalidPayloadError("watermarkData is required for the watermark algorithm")

        result = watermark.embed(load_image(Path(request.input_path)), request.watermark_data)

        requested = Path(request.output_path)
        output = lossless_path(requested)
        if output != requested:
            Log.info(f"Lossy output '{requested.suffix}' replaced with '{output.suffix}'")
        write_image(output, result.marked_image)
        preview = write_image(preview_path(output), result.preview_image)

        return WatermarkProcessResponse(
            output_path=str(output),
            preview_path=str(preview),
            embedded_text=result.evidence.embedded_text,
            algorithm=result.evidence.algorithm,
        )

    def _run_forensics(self, request: ProcessRequest) -> ForensicsProcessResponse:
        self._count("forensics_calls")
        result = forensics.analyze(load_image(Path(request.input_path)))
        report = result.report

        output = write_image(Path(request.output_path), result.heatmap_image)
        caption = f"ELA RISK {report.risk_level.value.upper()} {report.score}/100 (heuristic)"
        preview = write_image(preview_path(output), render_banner(result.heatmap_image, caption))

        return ForensicsProcessResponse(
            output_path=str(output),
            preview_path=str(preview),
            score=report.score,
            risk_level=report.risk_level.value,
            anomaly_intensity=report.anomaly_intensity,
        )

    def _count(self, counter: str) -> None:
        self.metrics.count(counter)
