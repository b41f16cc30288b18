"""Host configuration via environment variables."""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Logging
    log_level: str = "info"
    json_logs: bool = False

    # Classifier: raise instead of warn when a review entry is shadowed
    strict_review_table: bool = False

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "FLOWAUDIT_",
    }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
