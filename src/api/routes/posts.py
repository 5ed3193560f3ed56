"""
Posts API.

Public reads of published posts; authenticated writes. Scheduling is done by
setting scheduledAt on a draft; the publish sweep flips it when due.
"""

from typing import Any, NoReturn
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLitePostRepo
from src.api.deps import get_clock, get_current_user, get_optional_user, get_post_repo, get_rules
from src.api.schemas import PostCreateRequest, PostUpdateRequest, post_detail, post_summary
from src.components.posts import (
    REQUIRED_FIELDS,
    CreatePostInput,
    DeletePostInput,
    GetPostInput,
    ListPostsInput,
    ListTranslationsInput,
    PostValidationError,
    UpdatePostInput,
    missing_required,
    run_create,
    run_delete,
    run_get,
    run_list,
    run_list_translations,
    run_update,
)
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()

_STATUS_BY_CODE = {
    "not_found": status.HTTP_404_NOT_FOUND,
    "slug_exists": status.HTTP_409_CONFLICT,
}


def _raise_for(errors: list[PostValidationError]) -> NoReturn:
    first = errors[0]
    code = _STATUS_BY_CODE.get(first.code, status.HTTP_400_BAD_REQUEST)
    if code != status.HTTP_400_BAD_REQUEST or len(errors) == 1:
        raise HTTPException(status_code=code, detail=first.message)
    raise HTTPException(
        status_code=code,
        detail={
            "error": "Validation failed",
            "errors": [{"field": e.field, "code": e.code, "message": e.message} for e in errors],
        },
    )


def _parse_id(post_id: str) -> UUID:
    try:
        return UUID(post_id)
    except ValueError:
        raise HTTPException(status_code=404, detail="Post not found") from None


@router.get("")
def list_posts(
    lang: str | None = None,
    published: bool = True,
    tag: str | None = None,
    q: str | None = None,
    group: str | None = None,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
    user: User | None = Depends(get_optional_user),
) -> dict[str, Any]:
    """List posts in one language, newest first. published=false needs a token."""
    if not published and user is None:
        raise HTTPException(status_code=401, detail="No token provided")

    result = run_list(
        ListPostsInput(
            language=lang or rules.content.default_language,
            published_only=published,
            tag=tag,
            search=q,
            translation_group=group,
        ),
        repo=repo,
    )
    data = [post_summary(p) for p in result.items]
    return {"success": True, "count": len(data), "data": data}


@router.get("/{slug}/translations")
def list_translations(
    slug: str,
    lang: str | None = None,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
    user: User | None = Depends(get_optional_user),
) -> dict[str, Any]:
    result = run_list_translations(
        ListTranslationsInput(
            slug=slug,
            language=lang or rules.content.default_language,
            include_unpublished=user is not None,
        ),
        repo=repo,
    )
    if not result.success:
        _raise_for(result.errors)
    data = [post_summary(p) for p in result.items]
    return {"success": True, "count": len(data), "data": data}


@router.get("/{slug}")
def get_post(
    slug: str,
    lang: str | None = None,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
    user: User | None = Depends(get_optional_user),
) -> dict[str, Any]:
    """Single post by slug and language. Drafts are only visible with a valid token."""
    result = run_get(
        GetPostInput(
            slug=slug,
            language=lang or rules.content.default_language,
            include_unpublished=user is not None,
        ),
        repo=repo,
    )
    if not result.success or result.post is None:
        _raise_for(result.errors)
    return {"success": True, "data": post_detail(result.post)}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_post(
    req: PostCreateRequest,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    if missing_required(req.model_dump(include=set(REQUIRED_FIELDS))):
        raise HTTPException(
            status_code=400,
            detail={"error": "Missing required fields", "required": list(REQUIRED_FIELDS)},
        )

    inp = CreatePostInput(
        slug=req.slug or "",
        language=req.language or "",
        title=req.title or "",
        excerpt=req.excerpt or "",
        content=req.content or "",
        author=req.author,
        read_time=req.read_time,
        tags=req.tags or [],
        keywords=req.keywords or [],
        image=req.image,
        translation_group=req.translation_group,
        published=req.published,
        published_at=req.published_at,
        scheduled_at=req.scheduled_at,
    )
    result = run_create(inp, repo=repo, time=clock, rules=rules.content)
    if not result.success or result.post is None:
        _raise_for(result.errors)
    return {"success": True, "data": post_detail(result.post)}


@router.put("/{post_id}")
def update_post(
    post_id: str,
    req: PostUpdateRequest,
    repo: SQLitePostRepo = Depends(get_post_repo),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    """Partial update: only fields present in the body change."""
    updates = req.model_dump(exclude_unset=True)
    result = run_update(
        UpdatePostInput(post_id=_parse_id(post_id), updates=updates),
        repo=repo,
        time=clock,
        rules=rules.content,
    )
    if not result.success or result.post is None:
        _raise_for(result.errors)
    return {"success": True, "data": post_detail(result.post)}


@router.delete("/{post_id}")
def delete_post(
    post_id: str,
    repo: SQLitePostRepo = Depends(get_post_repo),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    result = run_delete(DeletePostInput(post_id=_parse_id(post_id)), repo=repo)
    if not result.success:
        _raise_for(result.errors)
    return {"success": True, "message": "Post deleted successfully"}
