from __future__ import annotations

import importlib
import logging
import os
from typing import Optional, Type

from dotenv import load_dotenv

from hotelbot.base_config import HotelBotConfig
from hotelbot.adapters.sqlite_adapter import SQLiteHotelAdapter
from hotelbot.exceptions import ConfigurationError

load_dotenv()

DEFAULT_CONFIG_CLASS = "hotelbot.config.EnvironmentHotelBotConfig"
CONFIG_ENV_KEY = "HOTELBOT_CONFIG"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

logger = logging.getLogger(__name__)


def _import_config_class(path: str) -> Type[HotelBotConfig]:
    try:
        module_path, class_name = path.rsplit(".", 1)
    except ValueError as exc:
        raise ConfigurationError(f"Invalid config path '{path}'") from exc

    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ConfigurationError(f"Could not import module '{module_path}'") from exc

    try:
        cls = getattr(module, class_name)
    except AttributeError as exc:
        raise ConfigurationError(f"Config class '{class_name}' not found in '{module_path}'") from exc

    if not isinstance(cls, type) or not issubclass(cls, HotelBotConfig):
        raise ConfigurationError(f"{path} is not a subclass of HotelBotConfig")

    return cls


class EnvironmentHotelBotConfig(HotelBotConfig):
    """Default configuration that reads from environment variables."""

    def __init__(self) -> None:
        self._env = os.environ

    def get_database_url(self) -> str:
        return self._env.get("DATABASE_URL", "sqlite:///hotelbot.db")

    def get_log_level(self) -> str:
        level = self._env.get("LOG_LEVEL", "INFO").upper()
        if level not in _LOG_LEVELS:
            logger.warning(f"Invalid LOG_LEVEL '{level}', falling back to INFO")
            return "INFO"
        return level

    def get_hotel_display_name(self) -> str:
        return self._env.get("HOTEL_NAME", "Hotel Bot")

    def create_adapter(self) -> SQLiteHotelAdapter:
        adapter = SQLiteHotelAdapter(self.get_database_url())
        adapter.init()
        self.seed_database(adapter)
        return adapter


_CONFIG: Optional[HotelBotConfig] = None


def get_config() -> HotelBotConfig:
    global _CONFIG
    if _CONFIG is None:
        class_path = os.getenv(CONFIG_ENV_KEY, DEFAULT_CONFIG_CLASS)
        cls = _import_config_class(class_path)
        _CONFIG = cls()
    return _CONFIG


def set_config(config: Optional[HotelBotConfig]) -> None:
    global _CONFIG
    _CONFIG = config
