"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    svgsketch_env: str = "development"
    svgsketch_log_level: str = "debug"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Sketch defaults applied to every request
    max_reference_depth: int = 32
    default_font_family: str = "Comic Sans MS, cursive"
    max_svg_bytes: int = 2_000_000

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
