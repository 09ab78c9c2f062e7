"""Application Settings - Environment-based configuration.

Uses Pydantic Settings for validation and type coercion.
All variables are read with the ``ORT_TTS_`` prefix, e.g.
``ORT_TTS_CACHE_DIR`` or ``ORT_TTS_NETWORK_LOAD_TIMEOUT_S``.
"""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from platformdirs import user_cache_dir
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ort_tts.config.constants import TTS


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ORT_TTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    log_json: bool = Field(default=True, description="Emit JSON log lines")

    # Asset cache
    cache_dir: Path | None = Field(
        default=None,
        description="Base cache directory (defaults to the platform user cache dir)",
    )
    cache_namespace: str = Field(
        default="kokoro",
        min_length=1,
        description="Subdirectory namespacing the current cache layout",
    )

    # Remote assets
    hf_endpoint: str = Field(
        default="https://huggingface.co", description="Remote asset host"
    )
    download_timeout_s: float = Field(
        default=30.0,
        gt=0,
        le=600,
        description="Per-request HTTP connect/read timeout",
    )
    network_load_timeout_s: float = Field(
        default=TTS.NETWORK_LOAD_TIMEOUT_S,
        ge=1,
        le=600,
        description="Bound on a complete network model load",
    )

    # Models
    default_model_id: str = Field(
        default="hexgrad/Kokoro-82M", description="Model loaded when none is given"
    )
    fallback_enabled: bool = Field(
        default=True, description="Register the fallback synthesizer at startup"
    )

    # Inference engine
    intra_op_threads: int = Field(
        default=1, ge=1, le=64, description="Inference engine intra-op threads"
    )

    @field_validator("hf_endpoint")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize the endpoint so URLs join cleanly."""
        return v.rstrip("/")

    @property
    def cache_base(self) -> Path:
        """Resolved base cache directory."""
        if self.cache_dir is not None:
            return self.cache_dir
        return Path(user_cache_dir())


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
