from datetime import datetime
from typing import Any

from src.domain.entities import Post, PostState


def post_state(post: Post) -> PostState:
    """
    Derive the publication state of a post.

    draft:      published=False, scheduled_at is None
    scheduled:  published=False, scheduled_at set
    published:  published=True
    """
    if post.published:
        return "published"
    if post.scheduled_at is not None:
        return "scheduled"
    return "draft"


def apply_publication_fields(post: Post, updates: dict[str, Any], now: datetime) -> Post:
    """
    Return a NEW Post with the updates applied and the publication fields normalised.

    Invariants:
    - a published post never keeps a scheduled_at
    - the first transition to published stamps published_at (unless given)
    - an explicit unpublish clears published_at
    """
    was_published = post.published
    merged = post.model_copy(update={**updates, "updated_at": now})

    fixes: dict[str, Any] = {}
    if merged.published:
        fixes["scheduled_at"] = None
        if not was_published and "published_at" not in updates:
            fixes["published_at"] = now
        elif merged.published_at is None:
            fixes["published_at"] = now
    elif was_published:
        fixes["published_at"] = None

    if fixes:
        merged = merged.model_copy(update=fixes)
    return merged
