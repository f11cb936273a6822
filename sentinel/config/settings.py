from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "sentinel"
    db_username: str = "sentinel"
    db_password: str = "secret"
    db_connect_timeout_seconds: float = 10.0

    repository_backend: str = "postgres"

    upload_dir: Path = Path("uploads")
    output_dir: Path = Path("output")
    max_upload_bytes: int = 20 * 1024 * 1024

    retention_hours: int = 24
    sweep_interval_seconds: int = 24 * 60 * 60

    default_watermark_text: str = "PROTECTED"

    engine_mode: str = "local"
    engine_base_url: str = "http://127.0.0.1:9000"
    engine_timeout_seconds: float = 60.0
    engine_host: str = "127.0.0.1"
    engine_port: int = 9000

    payment_provider: str = "example"
    payment_secret: str = "change-me"
    payment_amount: str = "0.10"
    payment_subject: str = "Image Sentinel Service"
    server_host: str = "http://localhost:8080"
