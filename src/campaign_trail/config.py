"""
Runtime settings for campaign-trail.

Values come from environment variables, optionally seeded from a ``.env``
file via python-dotenv.
"""

import logging
import os
from collections.abc import Mapping
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("campaign-trail")

ENV_PREFIX = "CAMPAIGN_TRAIL_"

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class TrailSettings(BaseModel):
    """Settings for the campaign-trail server.

    Attributes:
        data_dir: Directory holding the entity snapshot
        entities_file: Snapshot file name inside data_dir
        log_level: Standard logging level name
    """
    data_dir: Path = Field(default_factory=Path.cwd)
    entities_file: str = "entities.json"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(_LOG_LEVELS)}, got {value!r}")
        return level

    @property
    def entities_path(self) -> Path:
        return self.data_dir / self.entities_file


def load_settings(env: Mapping[str, str] | None = None) -> TrailSettings:
    """Build settings from environment variables.

    Args:
        env: Variables to read. Defaults to ``os.environ`` after loading
            ``.env``.

    Returns:
        TrailSettings with every ``CAMPAIGN_TRAIL_*`` override applied
    """
    if env is None:
        if not load_dotenv():
            logger.debug("No .env file found, using process environment only")
        env = os.environ

    values: dict[str, str | Path] = {}
    if env.get(f"{ENV_PREFIX}STORAGE_DIR"):
        values["data_dir"] = Path(env[f"{ENV_PREFIX}STORAGE_DIR"]).resolve()
    if env.get(f"{ENV_PREFIX}ENTITIES_FILE"):
        values["entities_file"] = env[f"{ENV_PREFIX}ENTITIES_FILE"]
    if env.get(f"{ENV_PREFIX}LOG_LEVEL"):
        values["log_level"] = env[f"{ENV_PREFIX}LOG_LEVEL"]

    return TrailSettings(**values)
