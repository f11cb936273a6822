from abc import ABC, abstractmethod

from sentinel.api.schemas import ProcessRequest, ProcessResponse, VerifyRequest, VerifyResponse


class BaseEngineClient(ABC):
    """Contract for reaching the watermark and forensic engines."""

    @abstractmethod
    def process(self, request: ProcessRequest) -> ProcessResponse:
        """Run an embed or forensic analysis request.

        Raises:
            EngineError: the engine rejected the request (bad payload, unreadable image...).
            UpstreamUnavailableError: the engine could not be reached.
        """

    @abstractmethod
    def verify(self, request: VerifyRequest) -> VerifyResponse:
        """Extract a watermark from the image at ``request.input_path``.

        Raises:
            EngineError: the image could not be read.
            UpstreamUnavailableError: the engine could not be reached.
        """

    def close(self) -> None:
        """Release any held resources. No-op by default."""
