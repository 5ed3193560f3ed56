"""
Analytics component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from src.domain.entities import AnalyticsEvent


class EventStorePort(Protocol):
    """Append-only store for tracked events."""

    def store(self, event: AnalyticsEvent) -> None:
        ...


class AnalyticsQueryPort(Protocol):
    """Aggregate queries over stored events."""

    def count_events(
        self, start: datetime, end: datetime | None = None, event: str | None = None
    ) -> int:
        ...

    def count_distinct(self, column: str, start: datetime, end: datetime | None = None) -> int:
        ...

    def group_counts(
        self,
        column: str,
        start: datetime,
        end: datetime | None = None,
        event: str | None = None,
        limit: int | None = None,
    ) -> list[tuple[str | None, int]]:
        ...

    def daily_pageviews(self, start: datetime, limit: int = 30) -> list[dict[str, Any]]:
        ...


class RateLimiterPort(Protocol):
    """Sliding-window limiter; records the request when it is allowed."""

    def allow_request(self, key: str, window: int, limit: int) -> bool:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
