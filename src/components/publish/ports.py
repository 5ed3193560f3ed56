"""Publish component port definitions - protocols for dependencies."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities import Post


class DuePostRepoPort(Protocol):
    """Persistence operations used by the publication sweep."""

    def list_due(self, now: datetime) -> list[Post]:
        """Posts with published=false and scheduled_at <= now."""
        ...

    def mark_published(self, post_id: UUID, now: datetime) -> bool:
        """Conditionally publish a due post. True only if a row changed."""
        ...


class NotifierPort(Protocol):
    """Cache invalidation for a changed post."""

    async def notify(self, slug: str, language: str) -> bool:
        ...


class ClockPort(Protocol):
    """Protocol for time operations."""

    def now_utc(self) -> datetime:
        """Return current UTC time."""
        ...
