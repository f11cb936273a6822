from typing import ClassVar


class UpstreamUnavailableError(Exception):
    """Raised when the engine service cannot be reached or is temporarily unable to answer.

    Distinct from EngineError: the image itself may be fine, so callers can
    retry later.
    """

    code: ClassVar[str] = "upstream_unavailable"
