"""
Posts component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID

from src.domain.entities import Post

# --- Validation Error ---


@dataclass(frozen=True)
class PostValidationError:
    """Post validation error."""

    code: str
    message: str
    field: str | None = None


# --- Input Models ---


@dataclass(frozen=True)
class CreatePostInput:
    """Input for creating a post. Optional fields fall back to configured defaults."""

    slug: str
    language: str
    title: str
    excerpt: str
    content: str
    author: str | None = None
    read_time: str | None = None
    tags: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    image: str | None = None
    translation_group: str | None = None
    published: bool = False
    published_at: datetime | None = None
    scheduled_at: datetime | None = None


@dataclass(frozen=True)
class UpdatePostInput:
    """Partial update; only keys present in `updates` are applied."""

    post_id: UUID
    updates: dict[str, Any]


@dataclass(frozen=True)
class GetPostInput:
    slug: str
    language: str
    include_unpublished: bool = False


@dataclass(frozen=True)
class ListPostsInput:
    """Input for listing posts with filters."""

    language: str | None = None
    published_only: bool = True
    tag: str | None = None
    search: str | None = None
    translation_group: str | None = None


@dataclass(frozen=True)
class ListTranslationsInput:
    """Sibling renditions of the post identified by (slug, language)."""

    slug: str
    language: str
    include_unpublished: bool = False


@dataclass(frozen=True)
class DeletePostInput:
    post_id: UUID


# --- Output Models ---


@dataclass(frozen=True)
class PostOutput:
    """Output for single-post operations (get, create, update, delete)."""

    post: Post | None = None
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class PostListOutput:
    items: list[Post] = field(default_factory=list)
    errors: list[PostValidationError] = field(default_factory=list)
    success: bool = True
