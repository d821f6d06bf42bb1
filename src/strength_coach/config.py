"""Configuration settings for the Strength Coach service."""

from pathlib import Path
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


# __file__ = src/strength_coach/config.py
# .parent.parent.parent = project root
PACKAGE_ROOT = Path(__file__).parent
PROJECT_ROOT = PACKAGE_ROOT.parent.parent


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=str(PROJECT_ROOT / ".env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    debug: bool = False
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # OpenAI
    openai_api_key: str = ""

    # Model selection
    llm_model_fast: str = "gpt-4o-mini"  # Suggestions, cycle picks
    llm_model_smart: str = "gpt-4o"

    # Generation resilience
    llm_timeout_seconds: float = 30.0
    llm_max_attempts: int = 3
    llm_temperature: float = 0.3

    # Persisted suggestion cache
    suggestion_cache_path: Path | None = None
    suggestion_cache_ttl_seconds: int = 24 * 60 * 60

    def model_post_init(self, __context) -> None:
        """Set default cache path after initialization."""
        if self.suggestion_cache_path is None:
            self.suggestion_cache_path = PROJECT_ROOT / "strength_coach_cache.db"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
