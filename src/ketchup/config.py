"""Configuration and environment for ketchup."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment and .env; CLI flags take precedence."""

    model_config = SettingsConfigDict(
        env_prefix="KETCHUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Kubernetes
    kubeconfig: Path | None = Field(default=None, description="Path to kubeconfig")
    context: str | None = Field(default=None, description="Kubernetes context to use")

    # Collection
    max_workers: int = Field(
        default=8,
        ge=1,
        le=64,
        description="Concurrent list calls against the API server",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for each API request, independent of the whole run",
    )
    page_size: int = Field(default=500, ge=1, le=5000, description="Objects per list page")

    # Output
    output_dir: Path = Field(default=Path("/tmp"), description="Directory receiving the collection")
    output_format: Literal["json", "yaml", "both"] = "yaml"
    compression: Literal["compressed", "uncompressed", "both"] = "compressed"


def get_settings(**overrides: Any) -> Settings:
    """Return validated settings; non-None overrides win over environment values."""
    return Settings(**{k: v for k, v in overrides.items() if v is not None})
