"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    svgraster_env: str = "development"
    svgraster_log_level: str = "info"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Rendering defaults
    svgraster_framerate: float = 30.0
    max_virtual_pixels: int = 30000
    loader_workers: int = 4
    load_timeout: float = 10.0

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
