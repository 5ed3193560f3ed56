"""Publish component - scheduled publication of posts."""

from src.components.publish.component import PublishSweeper
from src.components.publish.models import PublishedPost, SweepError, SweepOutput
from src.components.publish.ports import ClockPort, DuePostRepoPort, NotifierPort

__all__ = [
    # Component
    "PublishSweeper",
    # Models
    "SweepOutput",
    "SweepError",
    "PublishedPost",
    # Ports
    "DuePostRepoPort",
    "NotifierPort",
    "ClockPort",
]
