"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Change Rewind configuration loaded from environment variables."""

    # Application
    app_name: str = "Change Rewind"
    app_version: str = "0.1.0"

    # Logging
    log_level: str = "WARNING"

    # Analysis windows (e.g. "30m", "2h", "1d")
    score_window: str = "2h"
    rewind_window: str = "30m"
    max_event_limit: int = 1000

    # Scoring
    default_severity: str = "medium"
    scoring_max_workers: int = 1

    model_config = {
        "env_prefix": "REWIND_",
        "env_file": ".env",
        "extra": "ignore",
    }


settings = Settings()
