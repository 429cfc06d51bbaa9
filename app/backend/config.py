"""
Application configuration using Pydantic Settings.

Automatically loads environment variables from .env files. The settings
object is frozen: it is built once at startup and handed to the services
that need it.
"""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_OPENAI_MODEL = "gpt-4.1-2025-04-14"
DEFAULT_ANTHROPIC_MODEL = "claude-3-haiku-20240307"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM providers (at least one key is needed for extraction)
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None

    # Model overrides
    openai_model: str = DEFAULT_OPENAI_MODEL
    anthropic_model: str = DEFAULT_ANTHROPIC_MODEL

    # Upload limits
    max_file_size: int = 100 * 1024 * 1024  # 100 MiB

    # Server
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",  # Vite development server
        "http://127.0.0.1:5173",
    ]

    # Logging / debug flags
    log_level: str = "INFO"
    debug: bool = False

    model_config = SettingsConfigDict(
        # Load from .env file in the backend directory
        env_file=Path(__file__).parent / ".env",
        env_file_encoding="utf-8",
        extra="ignore",
        # Case insensitive environment variable names
        case_sensitive=False,
        frozen=True,
    )

    @property
    def configured_providers(self) -> list[str]:
        """Names of the LLM providers that have credentials, in default order."""
        providers = []
        if self.openai_api_key and self.openai_api_key.strip():
            providers.append("openai")
        if self.anthropic_api_key and self.anthropic_api_key.strip():
            providers.append("anthropic")
        return providers


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application configuration loaded from environment.
    """
    return Settings()
