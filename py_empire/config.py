"""Configuration management."""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

import structlog
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env for local/dev environments only for values missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    for key, value in file_env.items():
        if key not in os.environ and value is not None:
            os.environ[key] = value


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    debug: bool = Field(default=False, description="Enable debug mode")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (console or json)")

    # Map Generation Configuration
    default_map_width: int = Field(default=100, description="Default map width")
    default_map_height: int = Field(default=60, description="Default map height")
    max_map_width: int = Field(default=400, description="Max allowed map width")
    max_map_height: int = Field(default=400, description="Max allowed map height")
    max_generation_attempts: int = Field(
        default=100, description="Maps discarded before generation gives up"
    )
    max_stored_worlds: int = Field(
        default=32, description="Generated worlds kept in memory by the API"
    )


def configure_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Route structlog through stdlib logging with the configured renderer."""
    level = (level or settings.log_level).upper()
    log_format = log_format or settings.log_format

    logging.basicConfig(format="%(message)s", stream=sys.stderr, level=level)
    logging.getLogger().setLevel(level)

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


# Instantiate singleton settings object
settings = Settings()
