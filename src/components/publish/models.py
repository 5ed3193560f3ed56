"""Publish component models - frozen dataclass outputs."""

from dataclasses import dataclass, field
from uuid import UUID


@dataclass(frozen=True)
class SweepError:
    """A post that could not be transitioned during a sweep."""

    code: str
    message: str
    post_id: UUID | None = None


@dataclass(frozen=True)
class PublishedPost:
    """Content key of a post flipped to published by a sweep."""

    post_id: UUID
    slug: str
    language: str


@dataclass(frozen=True)
class SweepOutput:
    """
    Outcome of one sweep.

    due:       posts returned by the due query
    published: conditional updates that applied
    skipped:   due posts whose update matched no row (already handled elsewhere)
    failed:    posts whose update raised
    """

    due: int
    published: list[PublishedPost] = field(default_factory=list)
    skipped: int = 0
    failed: int = 0
    errors: list[SweepError] = field(default_factory=list)
    success: bool = True
