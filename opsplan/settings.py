"""
OpsPlan - Settings
==================

Runtime settings for the HTTP surface, loaded from environment variables
(and a `.env` file when present). The calculators never read these: every
engine function takes its parameters explicitly.

Usage:
    from opsplan.settings import EngineSettings

    window = EngineSettings.get_config().conflict_window_days

Environment variables:
    OPSPLAN_CONFLICT_WINDOW_DAYS=7
    OPSPLAN_LOG_LEVEL=INFO
    OPSPLAN_CORS_ORIGIN_REGEX=http://(localhost|127\\.0\\.0\\.1):\\d+
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from opsplan.scheduling.conflicts import DEFAULT_WINDOW_DAYS

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SettingsConfig:
    """Settings values. Defaults apply when the environment is silent."""
    conflict_window_days: int = DEFAULT_WINDOW_DAYS
    log_level: str = "INFO"
    cors_origin_regex: str = r"http://(localhost|127\.0\.0\.1):\d+"


class EngineSettings:
    """
    Class-level holder for settings.

    Loads once from the environment; `reset()` forces a reload (tests).
    """

    _instance: Optional[SettingsConfig] = None

    @classmethod
    def _load_from_env(cls) -> SettingsConfig:
        load_dotenv()
        config = SettingsConfig()

        window = os.environ.get("OPSPLAN_CONFLICT_WINDOW_DAYS")
        if window:
            try:
                days = int(window)
                if days < 1:
                    raise ValueError(window)
                config.conflict_window_days = days
                logger.info(f"Setting conflict_window_days = {days}")
            except ValueError:
                logger.warning(f"Invalid value for OPSPLAN_CONFLICT_WINDOW_DAYS: {window}")

        level = os.environ.get("OPSPLAN_LOG_LEVEL")
        if level:
            if level.upper() in LOG_LEVELS:
                config.log_level = level.upper()
            else:
                logger.warning(f"Invalid value for OPSPLAN_LOG_LEVEL: {level}")

        origin = os.environ.get("OPSPLAN_CORS_ORIGIN_REGEX")
        if origin:
            config.cors_origin_regex = origin

        return config

    @classmethod
    def get_config(cls) -> SettingsConfig:
        if cls._instance is None:
            cls._instance = cls._load_from_env()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @classmethod
    def to_dict(cls) -> Dict[str, Any]:
        config = cls.get_config()
        return {
            "conflict_window_days": config.conflict_window_days,
            "log_level": config.log_level,
        }
