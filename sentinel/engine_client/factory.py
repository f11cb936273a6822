from sentinel.config.settings import Settings
from sentinel.engine_client.base import BaseEngineClient
from sentinel.engine_client.http_adapter import HttpEngineClient
from sentinel.engine_client.local_adapter import LocalEngineClient


class EngineClientFactory:
    """Creates the engine client selected by settings.engine_mode."""

    MODES = ("local", "http")

    @classmethod
    def create(cls, settings: Settings) -> BaseEngineClient:
        mode = settings.engine_mode.lower()
        if mode == "local":
            return LocalEngineClient()
        if mode == "http":
            return HttpEngineClient(
                base_url=settings.engine_base_url,
                timeout_seconds=settings.engine_timeout_seconds,
            )
        raise ValueError(f"Unknown engine mode '{mode}'. Choose from: {list(cls.MODES)}")
