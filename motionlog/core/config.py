from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    api_prefix: str = "/api/v1"
    api_key: str = "change-me"
    cursor_key: str = ""
    database_url: str = "sqlite:///./motionlog.db"
    cors_allow_origins: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Clip storage and indexing.
    clip_storage_dir: Path = Path("storage/clips")
    storage_timezone: str = "US/Pacific"
    media_base_url: str = "https://storage.example.com/clips/"

    # Feed pagination.
    feed_page_size: int = 100
    feed_max_page_size: int = 500

    # Timeline client settings.
    feed_base_url: str = "http://127.0.0.1:8000/api/v1"
    display_timezone: str = ""
    fetch_timeout_seconds: float = 10.0

    log_dir: Path | None = None
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
