"""Configuration settings for the Uniform Registry micro-service.

This module exposes a *singleton* `settings` instance that encapsulates
all environment-driven configuration required by the service.
"""

from __future__ import annotations

from pathlib import Path

from dotenv import load_dotenv
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load variables from a local .env file *before* instantiating `Settings`.
load_dotenv()


class Settings(BaseSettings):
    """Application configuration pulled from the environment.

    Attributes:
        uniform_data_file: JSON file holding the whole uniform collection.
        uniform_uploads_dir: Directory uploaded images are written to.
        uniform_service_host: Host/interface to bind the HTTP server to.
        uniform_service_port: TCP port exposed by the HTTP server. Hosting
            platforms usually inject it as ``PORT``.
        uniform_service_n_workers: Number of *uvicorn* workers to spawn.
        cors_allowed_origins: Frontends allowed to call the API.
        delete_orphaned_images: Remove image files once no record points at them.
        log_level: Root logging level.
    """

    uniform_data_file: Path = Path("data/uniforms.json")
    uniform_uploads_dir: Path = Path("uploads")

    uniform_service_host: str = "0.0.0.0"
    uniform_service_port: int = Field(
        default=5000,
        validation_alias=AliasChoices("PORT", "UNIFORM_SERVICE_PORT"),
    )
    # the store lock is per process, keep a single worker
    uniform_service_n_workers: int = 1

    cors_allowed_origins: list[str] = [
        "https://uniform-pal.vercel.app",
        "https://localhost:5173",
    ]

    delete_orphaned_images: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


# Single shared settings instance
settings = Settings()
