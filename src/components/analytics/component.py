"""
Analytics component - pageview/event collection and dashboard statistics.

Invariants:
- Internal, rate-limited and bot traffic is never stored
- Tracking never fails the caller: storage errors yield tracked=False
- No geolocation: country/city are always null
- Visitors are identified by a truncated hash, never by raw IP
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any
from uuid import uuid4

from src.domain.entities import AnalyticsEvent
from src.rules.models import AnalyticsRules

from ._impl import browser_name, device_type, is_bot, is_internal_ip, os_name, user_hash
from .models import (
    AnalyticsValidationError,
    RealtimeOutput,
    StatsInput,
    StatsOutput,
    TrackEventInput,
    TrackOutput,
)
from .ports import AnalyticsQueryPort, EventStorePort, RateLimiterPort, TimePort

logger = logging.getLogger(__name__)

STATS_TYPES = ("overview", "pages", "devices", "browsers", "referrers", "tools", "daily")
DAILY_LIMIT = 30


# --- Tracking ---


def run_track(
    inp: TrackEventInput,
    *,
    store: EventStorePort,
    limiter: RateLimiterPort,
    rules: AnalyticsRules,
    time: TimePort,
) -> TrackOutput:
    """
    Filter, classify and store one event.

    Args:
        inp: Event payload plus request metadata.
        store: Event store port.
        limiter: Per-IP rate limiter.
        rules: Analytics rules (exclusions, rate limit).
        time: Time port for created_at.

    Returns:
        TrackOutput; success=False only for a missing path.
    """
    req = inp.request

    if is_internal_ip(req.ip, rules.excluded_ips, rules.exclude_tailscale):
        logger.debug("Analytics filtered: internal IP %s", req.ip)
        return TrackOutput(tracked=False, reason="internal")

    limit = rules.rate_limit.max_requests if rules.rate_limit.max_requests is not None else 100
    if not limiter.allow_request(f"analytics:{req.ip}", rules.rate_limit.window_seconds, limit):
        logger.debug("Analytics filtered: rate limited %s", req.ip)
        return TrackOutput(tracked=False, reason="rate_limited")

    if is_bot(req.user_agent, req.accept_language):
        logger.debug("Analytics filtered: bot UA %.80s", req.user_agent)
        return TrackOutput(tracked=False, reason="bot")

    if not inp.path:
        return TrackOutput(
            tracked=False,
            errors=[
                AnalyticsValidationError(
                    code="path_required", message="path is required", field="path"
                )
            ],
            success=False,
        )

    session_id = inp.session_id or str(uuid4())
    event = AnalyticsEvent(
        session_id=session_id,
        user_id=inp.user_id or user_hash(req.ip, req.user_agent),
        path=inp.path,
        event=inp.event or "pageview",
        referrer=inp.referrer or req.referer or None,
        device_type=device_type(req.user_agent),
        browser=browser_name(req.user_agent),
        os=os_name(req.user_agent),
        language=inp.language or None,
        tool_name=inp.tool_name or None,
        metadata=inp.metadata or None,
        created_at=time.now_utc(),
    )

    try:
        store.store(event)
    except Exception:
        logger.exception("Analytics tracking error")
        return TrackOutput(tracked=False, reason="error")

    logger.debug("Analytics tracked: %s on %s", event.event, event.path)
    return TrackOutput(tracked=True, session_id=session_id)


# --- Statistics ---


def parse_date_param(value: str | None) -> datetime | None:
    """ISO date or datetime from a query string; naive values are UTC."""
    if not value:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def _overview(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    sessions = repo.count_distinct("session_id", start, end)
    users = repo.count_distinct("user_id", start, end)
    return {
        "pageviews": repo.count_events(start, end, event="pageview"),
        "sessions": sessions,
        # Fall back to sessions when no visitor ids were recorded
        "users": users or sessions,
        "totalEvents": repo.count_events(start, end),
    }


def _pages(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    rows = repo.group_counts("path", start, end, event="pageview", limit=top)
    return [{"path": value, "views": n} for value, n in rows]


def _devices(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    return [{"device": v, "count": n} for v, n in repo.group_counts("device_type", start, end)]


def _browsers(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    return [{"browser": v, "count": n} for v, n in repo.group_counts("browser", start, end)]


def _referrers(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    rows = repo.group_counts("referrer", start, end, limit=top)
    return [{"referrer": v, "count": n} for v, n in rows]


def _tools(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    rows = repo.group_counts("tool_name", start, end, event="tool_usage")
    return [{"tool": v, "uses": n} for v, n in rows]


def _daily(repo: AnalyticsQueryPort, start: datetime, end: datetime | None, top: int) -> Any:
    return repo.daily_pageviews(start, limit=DAILY_LIMIT)


_STATS_HANDLERS: dict[
    str, Callable[[AnalyticsQueryPort, datetime, datetime | None, int], Any]
] = {
    "overview": _overview,
    "pages": _pages,
    "devices": _devices,
    "browsers": _browsers,
    "referrers": _referrers,
    "tools": _tools,
    "daily": _daily,
}


def run_stats(
    inp: StatsInput,
    *,
    repo: AnalyticsQueryPort,
    rules: AnalyticsRules,
    time: TimePort,
) -> StatsOutput:
    """Dashboard statistics over [start_date, end_date]; default window is the last N days."""
    handler = _STATS_HANDLERS.get(inp.type)
    if handler is None:
        return StatsOutput(
            errors=[
                AnalyticsValidationError(
                    code="invalid_type",
                    message=f"Invalid type. Available: {', '.join(STATS_TYPES)}",
                    field="type",
                )
            ],
            success=False,
        )

    try:
        start = parse_date_param(inp.start_date)
        end = parse_date_param(inp.end_date)
    except ValueError:
        return StatsOutput(
            errors=[
                AnalyticsValidationError(
                    code="invalid_date",
                    message="startDate and endDate must be ISO 8601 dates",
                    field="startDate",
                )
            ],
            success=False,
        )

    if start is None:
        start = time.now_utc() - timedelta(days=rules.default_window_days)

    return StatsOutput(data=handler(repo, start, end, rules.top_limit))


def run_realtime(
    *,
    repo: AnalyticsQueryPort,
    rules: AnalyticsRules,
    time: TimePort,
) -> RealtimeOutput:
    """Distinct sessions seen in the last few minutes."""
    since = time.now_utc() - timedelta(minutes=rules.realtime_window_minutes)
    return RealtimeOutput(active_users=repo.count_distinct("session_id", since), since=since)
