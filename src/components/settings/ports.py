"""
Settings component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.domain.entities import Setting


class SettingsRepoPort(Protocol):
    """Repository interface for key/value settings."""

    def get(self, key: str) -> Setting | None:
        ...

    def list_all(self) -> list[Setting]:
        ...

    def upsert(self, setting: Setting) -> Setting:
        """Create or replace the value stored under setting.key."""
        ...

    def delete(self, key: str) -> bool:
        """Remove a key. False if it did not exist."""
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
