"""
Configuration loader for the classic background-removal service.

Environment variables are centralized here to keep the rest of the code
focused on business logic and to make operational tuning clear. Per-request
matting parameters are not settings; see `params.MattingParams`.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False)

    # Upstream image fetch
    max_download_bytes: int = 16 * 1024 * 1024
    request_timeout_seconds: int = 20
    user_agent: str = "bg-remover-classic/1.0 (+https://local)"

    # Matting defaults
    default_max_size: int = 1024

    # API
    log_level: str = "INFO"

    # Debugging
    debug: bool = False
    debug_output_dir: Path = Path("/tmp/bgremover_classic_debug")

    @field_validator("max_download_bytes", "request_timeout_seconds")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    @field_validator("default_max_size")
    @classmethod
    def validate_max_size(cls, v: int) -> int:
        if not 128 <= v <= 4096:
            raise ValueError("DEFAULT_MAX_SIZE must be within 128..4096")
        return v


@lru_cache()
def get_settings() -> Settings:
    """Return cached settings to avoid reparsing env on every call."""
    return Settings()
