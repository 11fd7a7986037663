"""
TreeDiff - Structural Diff Engine
"""
from pydantic_settings import BaseSettings
from typing import Optional

from diffcore.types import DiffOptions


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    # Application Info
    APP_NAME: str = "TreeDiff"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "WARNING"

    # Comparison defaults (callers can override per request)
    DEFAULT_MAX_DEPTH: Optional[int] = None      # None = unbounded
    DEFAULT_SEQUENCE_DIFF_MODE: str = "lcs"      # "lcs" or "positional"
    DEFAULT_DETECT_CYCLES: bool = True
    DEFAULT_IGNORE_KEYS: list[str] = []

    # CORS - comma-separated list of allowed origins, or "*" for all
    CORS_ORIGINS: str = "*"

    # Maximum request body size in bytes (10MB default)
    MAX_REQUEST_SIZE: int = 10 * 1024 * 1024

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    def diff_options(self) -> DiffOptions:
        """Default DiffOptions built from these settings."""
        return DiffOptions(
            max_depth=self.DEFAULT_MAX_DEPTH,
            ignore_keys=frozenset(self.DEFAULT_IGNORE_KEYS),
            sequence_diff_mode=self.DEFAULT_SEQUENCE_DIFF_MODE,
            detect_cycles=self.DEFAULT_DETECT_CYCLES,
        )

    def log_level(self) -> str:
        return "DEBUG" if self.DEBUG else self.LOG_LEVEL.upper()


settings = Settings()
