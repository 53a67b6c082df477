"""Configuration and environment settings for the Tally Document Bridge."""

from pydantic_settings import BaseSettings, SettingsConfigDict

MEGABYTE = 1024 * 1024


class Settings(BaseSettings):
    """Application settings for the Tally Document Bridge.

    Tally connection parameters are not part of the settings; they arrive with
    every request as a ``TallyConfig``.
    """

    max_upload_bytes: int = 10 * MEGABYTE
    batch_size: int = 5
    batch_delay_seconds: float = 0.5
    tally_test_timeout: float = 10.0
    tally_send_timeout: float | None = None
    large_image_threshold: int = 500_000
    image_extractor: str = "template"
    log_dir: str = "logs"
    log_file: str = "bridge.log"
    server_host: str = "127.0.0.1"
    server_port: int = 8000

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")


def get_settings() -> "Settings":
    """Return an instance of the application settings."""
    return Settings()
