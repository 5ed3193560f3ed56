"""
Posts component port definitions.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import Protocol
from uuid import UUID

from src.domain.entities import Post


class PostRepoPort(Protocol):
    """Repository interface for posts."""

    def get_by_id(self, post_id: UUID) -> Post | None:
        ...

    def get_by_slug(self, slug: str, language: str) -> Post | None:
        ...

    def list_posts(
        self,
        language: str | None = None,
        published_only: bool = True,
        tag: str | None = None,
        search: str | None = None,
        translation_group: str | None = None,
    ) -> list[Post]:
        ...

    def list_translations(self, group: str, exclude_id: UUID | None = None) -> list[Post]:
        ...

    def create(self, post: Post) -> Post:
        """Insert. Raises DuplicateSlugError on (slug, language) conflict."""
        ...

    def update(self, post: Post, fields: Iterable[str]) -> Post:
        """
        Persist only the named fields and return the stored post.
        Raises DuplicateSlugError on (slug, language) conflict.
        """
        ...

    def delete(self, post_id: UUID) -> bool:
        ...


class TimePort(Protocol):
    """Port for time operations."""

    def now_utc(self) -> datetime:
        ...
