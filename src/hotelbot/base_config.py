"""
Base configuration abstractions for Hotel Bot.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

from hotelbot.adapters.sqlite_adapter import SQLiteHotelAdapter


class HotelBotConfig(ABC):
    """Abstract configuration contract for all deployments / tenants."""

    @abstractmethod
    def get_database_url(self) -> str:
        """Return database URL used by persistence layer."""

    @abstractmethod
    def create_adapter(self) -> SQLiteHotelAdapter:
        """Return an initialised store for rooms and reservations."""

    def get_log_level(self) -> str: return "INFO"
    def get_hotel_display_name(self) -> str: return "Hotel Bot"

    def seed_database(self, adapter: SQLiteHotelAdapter) -> None:
        """Core ships no data. Tenant configs override this to add their rooms."""
        return None
