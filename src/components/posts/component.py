"""
Posts component - create, read, update and delete language-specific posts.

Publication fields on direct edits:
- draft:      published=False, scheduled_at unset
- scheduled:  published=False, scheduled_at set (picked up by the publish sweep)
- published:  published=True, scheduled_at cleared, published_at stamped once

(slug, language) identifies a post publicly; the same slug may exist once per
language.
"""

from __future__ import annotations

import logging
import re
from datetime import UTC, datetime
from typing import Any

from src.domain.entities import Post
from src.domain.errors import DuplicateSlugError
from src.domain.state import apply_publication_fields, post_state
from src.rules.models import ContentRules

from .models import (
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListPostsInput,
    ListTranslationsInput,
    PostListOutput,
    PostOutput,
    PostValidationError,
    UpdatePostInput,
)
from .ports import PostRepoPort, TimePort

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("slug", "language", "title", "excerpt", "content")

# Fields a client may change through an update
UPDATABLE_FIELDS = frozenset(
    {
        "slug",
        "language",
        "title",
        "excerpt",
        "content",
        "author",
        "read_time",
        "tags",
        "keywords",
        "image",
        "translation_group",
        "published",
        "published_at",
        "scheduled_at",
    }
)

# An explicit null for these is ignored rather than stored
NON_NULLABLE_FIELDS = frozenset(
    {"slug", "language", "title", "excerpt", "content", "author", "read_time", "published"}
)


# --- Validation Functions ---


def _as_utc(dt: datetime | None) -> datetime | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def missing_required(values: dict[str, Any]) -> list[str]:
    """Names of required fields that are absent or blank."""
    return [
        name
        for name in REQUIRED_FIELDS
        if not isinstance(values.get(name), str) or not values[name].strip()
    ]


def _validate_post(post: Post, rules: ContentRules) -> list[PostValidationError]:
    errors: list[PostValidationError] = []

    for name in missing_required(post.model_dump(include=set(REQUIRED_FIELDS))):
        errors.append(
            PostValidationError(
                code="required",
                message=f"Field '{name}' is required",
                field=name,
            )
        )
    if errors:
        return errors

    if not re.match(rules.slug_pattern, post.slug):
        errors.append(
            PostValidationError(
                code="slug_invalid",
                message="Slug must contain only lowercase letters, numbers, and hyphens",
                field="slug",
            )
        )

    if post.language not in rules.languages:
        errors.append(
            PostValidationError(
                code="language_unsupported",
                message=f"Language must be one of: {', '.join(rules.languages)}",
                field="language",
            )
        )

    if len(post.title) > rules.title_max:
        errors.append(
            PostValidationError(
                code="title_too_long",
                message=f"Title must not exceed {rules.title_max} characters",
                field="title",
            )
        )

    return errors


def _slug_exists(post: Post) -> PostValidationError:
    return PostValidationError(
        code="slug_exists",
        message="Post with this slug and language already exists",
        field="slug",
    )


def _not_found() -> PostValidationError:
    return PostValidationError(code="not_found", message="Post not found")


# --- Component Entry Points ---


def run_list(inp: ListPostsInput, *, repo: PostRepoPort) -> PostListOutput:
    """List posts, newest first."""
    items = repo.list_posts(
        language=inp.language,
        published_only=inp.published_only,
        tag=inp.tag,
        search=inp.search,
        translation_group=inp.translation_group,
    )
    return PostListOutput(items=items)


def run_get(inp: GetPostInput, *, repo: PostRepoPort) -> PostOutput:
    """
    Get a post by (slug, language).

    Unpublished posts are reported as not found unless include_unpublished.
    """
    post = repo.get_by_slug(inp.slug, inp.language)
    if post is None or (not post.published and not inp.include_unpublished):
        return PostOutput(errors=[_not_found()], success=False)
    return PostOutput(post=post)


def run_list_translations(inp: ListTranslationsInput, *, repo: PostRepoPort) -> PostListOutput:
    """Other-language renditions sharing the post's translation group."""
    post = repo.get_by_slug(inp.slug, inp.language)
    if post is None or (not post.published and not inp.include_unpublished):
        return PostListOutput(errors=[_not_found()], success=False)

    if not post.translation_group:
        return PostListOutput(items=[])

    siblings = repo.list_translations(post.translation_group, exclude_id=post.id)
    if not inp.include_unpublished:
        siblings = [p for p in siblings if p.published]
    return PostListOutput(items=siblings)


def run_create(
    inp: CreatePostInput,
    *,
    repo: PostRepoPort,
    time: TimePort,
    rules: ContentRules,
) -> PostOutput:
    """
    Create a draft, scheduled or published post.

    Args:
        inp: Post fields.
        repo: Post repository port.
        time: Time port for timestamps.
        rules: Content rules (slug pattern, languages, defaults).

    Returns:
        PostOutput with the created post or errors.
    """
    now = time.now_utc()

    draft = Post(
        slug=inp.slug,
        language=inp.language,
        title=inp.title,
        excerpt=inp.excerpt,
        content=inp.content,
        author=inp.author or rules.default_author,
        read_time=inp.read_time or rules.default_read_time,
        tags=list(inp.tags),
        keywords=list(inp.keywords),
        image=inp.image,
        translation_group=inp.translation_group,
        created_at=now,
        updated_at=now,
    )

    errors = _validate_post(draft, rules)
    if errors:
        return PostOutput(errors=errors, success=False)

    publication: dict[str, Any] = {
        "published": inp.published,
        "scheduled_at": _as_utc(inp.scheduled_at),
    }
    if inp.published_at is not None:
        publication["published_at"] = _as_utc(inp.published_at)
    post = apply_publication_fields(draft, publication, now)

    try:
        saved = repo.create(post)
    except DuplicateSlugError:
        return PostOutput(errors=[_slug_exists(post)], success=False)

    logger.info("Post created: %s (%s) as %s", saved.slug, saved.language, post_state(saved))
    return PostOutput(post=saved)


def run_update(
    inp: UpdatePostInput,
    *,
    repo: PostRepoPort,
    time: TimePort,
    rules: ContentRules,
) -> PostOutput:
    """
    Apply a partial update.

    id and created_at are never changed; unknown keys are ignored.
    """
    post = repo.get_by_id(inp.post_id)
    if post is None:
        return PostOutput(errors=[_not_found()], success=False)

    updates = {
        k: v
        for k, v in inp.updates.items()
        if k in UPDATABLE_FIELDS and not (v is None and k in NON_NULLABLE_FIELDS)
    }
    for key in ("published_at", "scheduled_at"):
        if key in updates:
            updates[key] = _as_utc(updates[key])
    for key in ("tags", "keywords"):
        if key in updates and updates[key] is None:
            updates[key] = []

    updated = apply_publication_fields(post, updates, time.now_utc())

    errors = _validate_post(updated, rules)
    if errors:
        return PostOutput(post=post, errors=errors, success=False)

    if updated.slug != post.slug or updated.language != post.language:
        existing = repo.get_by_slug(updated.slug, updated.language)
        if existing and existing.id != post.id:
            return PostOutput(post=post, errors=[_slug_exists(updated)], success=False)

    # Only what the client sent or the publication rules adjusted is written
    changed = set(updates) | {
        name for name in UPDATABLE_FIELDS if getattr(updated, name) != getattr(post, name)
    }

    try:
        saved = repo.update(updated, changed)
    except DuplicateSlugError:
        return PostOutput(post=post, errors=[_slug_exists(updated)], success=False)

    logger.info("Post updated: %s (%s) now %s", saved.slug, saved.language, post_state(saved))
    return PostOutput(post=saved)


def run_delete(inp: DeletePostInput, *, repo: PostRepoPort) -> PostOutput:
    """Hard delete."""
    if not repo.delete(inp.post_id):
        return PostOutput(errors=[_not_found()], success=False)
    logger.info("Post deleted: %s", inp.post_id)
    return PostOutput()
