"""
Analytics component - event collection and statistics.
"""

from ._impl import (
    browser_name,
    client_ip,
    device_type,
    is_bot,
    is_internal_ip,
    is_tailscale_ip,
    os_name,
    user_hash,
)
from .component import STATS_TYPES, parse_date_param, run_realtime, run_stats, run_track
from .models import (
    AnalyticsValidationError,
    RealtimeOutput,
    StatsInput,
    StatsOutput,
    TrackEventInput,
    TrackOutput,
    TrackRequest,
)
from .ports import AnalyticsQueryPort, EventStorePort, RateLimiterPort, TimePort

__all__ = [
    # Entry points
    "run_track",
    "run_stats",
    "run_realtime",
    "STATS_TYPES",
    "parse_date_param",
    # Filtering / classification
    "client_ip",
    "is_internal_ip",
    "is_tailscale_ip",
    "is_bot",
    "user_hash",
    "device_type",
    "browser_name",
    "os_name",
    # Models
    "TrackRequest",
    "TrackEventInput",
    "TrackOutput",
    "StatsInput",
    "StatsOutput",
    "RealtimeOutput",
    "AnalyticsValidationError",
    # Ports
    "EventStorePort",
    "AnalyticsQueryPort",
    "RateLimiterPort",
    "TimePort",
]
