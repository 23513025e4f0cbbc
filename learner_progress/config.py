"""
Engine configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Local key-value store (rehydrated at process start)
    local_store_url: str = "sqlite:///learner_progress.db"
    storage_schema_version: int = 1

    # Remote document store; empty means offline/demo mode
    remote_base_url: str = ""
    remote_api_token: str = ""
    remote_timeout_seconds: float = 10.0

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    project_name: str = "Learner Progress Engine"
    version: str = "0.1.0"

    @property
    def demo_mode(self) -> bool:
        """True when no remote backend is configured."""
        return not self.remote_base_url


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
