from pathlib import Path

import pytest
from pydantic import ValidationError

from sentinel.config.settings import Settings


class TestSettingsDefaults:
    def test_defaults(self) -> None:
        s = Settings(_env_file=None)
        assert s.app_env == "dev"
        assert s.db_port == 5432
        assert s.repository_backend == "postgres"
        assert s.engine_mode == "local"
        assert s.payment_provider == "example"

    def test_default_limits(self) -> None:
        s = Settings(_env_file=None)
        assert s.max_upload_bytes == 20 * 1024 * 1024
        assert s.retention_hours == 24
        assert s.sweep_interval_seconds == 86400
        assert s.default_watermark_text == "PROTECTED"


class TestSettingsFromEnv:
    def test_loads_paths(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("UPLOAD_DIR", "/srv/uploads")
        s = Settings(_env_file=None)
        assert s.upload_dir == Path("/srv/uploads")

    def test_loads_engine_settings(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENGINE_MODE", "http")
        monkeypatch.setenv("ENGINE_BASE_URL", "http://engine:9000")
        monkeypatch.setenv("ENGINE_TIMEOUT_SECONDS", "2.5")
        s = Settings(_env_file=None)
        assert s.engine_mode == "http"
        assert s.engine_base_url == "http://engine:9000"
        assert s.engine_timeout_seconds == 2.5

    def test_invalid_int(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RETENTION_HOURS", "a day")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_reads_env_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("PAYMENT_AMOUNT=1.50\nUNRELATED_KEY=ignored\n")
        s = Settings(_env_file=env_file)
        assert s.payment_amount == "1.50"
