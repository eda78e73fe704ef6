"""Application configuration (card API connection, logging, AI defaults).

Values come from defaults overlaid by environment variables. A `.env` file
in the working directory (or the path given to load_config) is read first,
without overriding variables that are already set.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import BaseModel

from .models import GameSettings

logger = logging.getLogger(__name__)

_CONFIG_DEFAULTS: dict[str, Any] = {
    "scryfall_base_url": "https://api.scryfall.com",
    "scryfall_rate_limit_ms": 100,
    "scryfall_timeout": 30.0,
    "log_level": "INFO",
    "personality": "default",
}

# env var → config field
_ENV_VARS = {
    "SCRYFALL_BASE_URL": "scryfall_base_url",
    "SCRYFALL_RATE_LIMIT_MS": "scryfall_rate_limit_ms",
    "SCRYFALL_TIMEOUT": "scryfall_timeout",
    "CHAOS_RPG_LOG_LEVEL": "log_level",
    "CHAOS_RPG_PERSONALITY": "personality",
}

DEFAULT_SETTINGS = GameSettings()


class AppConfig(BaseModel):
    scryfall_base_url: str
    scryfall_rate_limit_ms: int
    scryfall_timeout: float
    log_level: str
    personality: str


def load_config(env_file: Path | None = None) -> AppConfig:
    """Read .env, then return defaults merged with environment values."""
    load_dotenv(env_file or Path.cwd() / ".env")
    config: dict[str, Any] = dict(_CONFIG_DEFAULTS)
    for var, field in _ENV_VARS.items():
        value = os.getenv(var)
        if value:
            config[field] = value
    config["log_level"] = str(config["log_level"]).upper()
    # pydantic coerces the numeric strings coming from the environment
    return AppConfig.model_validate(config)


def configure_logging(config: AppConfig) -> None:
    level = logging.getLevelName(config.log_level)
    if not isinstance(level, int):
        logger.warning("Unknown log level %r, falling back to INFO", config.log_level)
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
