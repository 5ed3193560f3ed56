"""
Analytics component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class AnalyticsValidationError:
    """Analytics validation error."""

    code: str
    message: str
    field: str | None = None


# --- Track ---


@dataclass(frozen=True)
class TrackRequest:
    """Request metadata the collector filters and classifies on."""

    ip: str
    user_agent: str
    accept_language: str | None = None
    referer: str | None = None


@dataclass(frozen=True)
class TrackEventInput:
    request: TrackRequest
    path: str | None
    event: str = "pageview"
    referrer: str | None = None
    session_id: str | None = None
    user_id: str | None = None
    language: str | None = None
    tool_name: str | None = None
    metadata: dict[str, Any] | None = None


@dataclass(frozen=True)
class TrackOutput:
    """
    tracked=False with a reason when the event was filtered or not stored:
    internal, rate_limited, bot, error.
    """

    tracked: bool
    reason: str | None = None
    session_id: str | None = None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


# --- Stats ---


@dataclass(frozen=True)
class StatsInput:
    type: str = "overview"
    start_date: str | None = None
    end_date: str | None = None


@dataclass(frozen=True)
class StatsOutput:
    data: Any = None
    errors: list[AnalyticsValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class RealtimeOutput:
    active_users: int
    since: datetime
