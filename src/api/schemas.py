from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from src.domain.entities import Post, User


class CamelModel(BaseModel):
    """Wire models use camelCase; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Posts ---
class PostCreateRequest(CamelModel):
    # Required fields are checked in the route so a missing one yields a single
    # 400 listing all of them
    slug: str | None = None
    language: str | None = None
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    read_time: str | None = None
    tags: list[str] | None = None
    keywords: list[str] | None = None
    image: str | None = None
    translation_group: str | None = None
    published: bool = False
    published_at: datetime | None = None
    scheduled_at: datetime | None = None


class PostUpdateRequest(CamelModel):
    slug: str | None = None
    language: str | None = None
    title: str | None = None
    excerpt: str | None = None
    content: str | None = None
    author: str | None = None
    read_time: str | None = None
    tags: list[str] | None = None
    keywords: list[str] | None = None
    image: str | None = None
    translation_group: str | None = None
    published: bool | None = None
    published_at: datetime | None = None
    scheduled_at: datetime | None = None


class PostSummaryResponse(CamelModel):
    """List view; the body is omitted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    slug: str
    language: str
    title: str
    excerpt: str
    author: str
    read_time: str
    tags: list[str]
    keywords: list[str]
    image: str | None = None
    translation_group: str | None = None
    published: bool
    published_at: datetime | None = None
    scheduled_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class PostResponse(PostSummaryResponse):
    content: str


def post_summary(post: Post) -> dict[str, Any]:
    return PostSummaryResponse.model_validate(post).model_dump(mode="json", by_alias=True)


def post_detail(post: Post) -> dict[str, Any]:
    return PostResponse.model_validate(post).model_dump(mode="json", by_alias=True)


# --- Users / Auth ---
class LoginRequest(BaseModel):
    email: str
    password: str


class RegisterRequest(BaseModel):
    email: str
    password: str
    name: str
    role: str = "editor"


class UserResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: UUID
    email: str
    name: str
    role: str
    created_at: datetime


def user_json(user: User) -> dict[str, Any]:
    return UserResponse.model_validate(user).model_dump(mode="json", by_alias=True)


# --- Analytics ---
class TrackRequestBody(CamelModel):
    path: str | None = None
    event: str = "pageview"
    referrer: str | None = None
    session_id: str | None = None
    user_id: str | None = None
    language: str | None = None
    tool_name: str | None = None
    metadata: dict[str, Any] | None = None
