# config.py
"""Configuration settings for the movies graph data-access layer.
Uses Pydantic BaseSettings for automatic environment variable loading.
"""

from __future__ import annotations

import structlog
from dotenv import load_dotenv
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()

logger = structlog.get_logger()

ACCESS_STRATEGIES = ("driver", "extensions", "fluent")
DEFAULT_NEO4J_PASSWORD = "movies_password"


class MoviesSettings(BaseSettings):
    """Full configuration for the movies data-access layer."""

    # Neo4j Connection Settings
    NEO4J_URI: str = "bolt://localhost:7687"
    NEO4J_USER: str = "neo4j"
    NEO4J_PASSWORD: str = DEFAULT_NEO4J_PASSWORD
    NEO4J_DATABASE: str | None = "neo4j"

    # Timeouts are owned by the driver; this layer only passes them through.
    NEO4J_MAX_TRANSACTION_RETRY_TIME: float = 30.0
    NEO4J_CONNECTION_ACQUISITION_TIMEOUT: float = 60.0

    # Query access
    ACCESS_STRATEGY: str = "driver"
    STRICT_RELATIONSHIP_TYPES: bool = True

    # Logging & UI
    LOG_LEVEL_STR: str = Field("INFO", alias="MOVIES_LOG_LEVEL")
    LOG_FORMAT: str = (
        "%(asctime)s - %(levelname)s - [%(name)s:%(funcName)s:%(lineno)d] - %(message)s"
    )
    LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"
    LOG_DIR: str = "logs"
    LOG_FILE: str | None = "movies.log"
    ENABLE_RICH_LOGGING: bool = True

    @model_validator(mode="after")
    def check_access_settings(self) -> MoviesSettings:
        strategy = self.ACCESS_STRATEGY.strip().lower()
        if strategy not in ACCESS_STRATEGIES:
            raise ValueError(
                f"ACCESS_STRATEGY must be one of {', '.join(ACCESS_STRATEGIES)}, got {self.ACCESS_STRATEGY!r}"
            )
        self.ACCESS_STRATEGY = strategy
        if self.NEO4J_PASSWORD == DEFAULT_NEO4J_PASSWORD:
            logger.warning(
                "NEO4J_PASSWORD is using the default placeholder. Set it in the environment or .env."
            )
        return self

    model_config = SettingsConfigDict(
        env_prefix="", env_file=".env", populate_by_name=True, extra="ignore"
    )


settings = MoviesSettings()
