from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "HTTPHEALTH_",
        "extra": "ignore",
    }

    # API (config file `listen` section and CLI flags take precedence)
    listen_address: str = "0.0.0.0"
    listen_port: int = 8000

    # Check config file; empty = search the default locations
    config_file: str = ""

    # Logging
    log_level: str = "INFO"


settings = Settings()
