from datetime import UTC, datetime
from typing import Any, Literal
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

# --- Enums / Literals ---
RoleType = Literal["admin", "editor"]
PostState = Literal["draft", "scheduled", "published"]


def utcnow() -> datetime:
    return datetime.now(UTC)


# --- User & Auth ---

class User(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    email: str
    password_hash: str
    name: str
    role: RoleType = "editor"
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

# --- Posts ---

class Post(BaseModel):
    """One language-specific rendition of an article."""

    id: UUID = Field(default_factory=uuid4)
    slug: str
    language: str
    title: str
    excerpt: str
    content: str
    author: str = "Editorial Team"
    read_time: str = "5 min"
    tags: list[str] = Field(default_factory=list)
    keywords: list[str] = Field(default_factory=list)
    image: str | None = None

    # Manually assigned; links sibling-language renditions of the same article
    translation_group: str | None = None

    published: bool = False
    published_at: datetime | None = None
    scheduled_at: datetime | None = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

# --- Config ---

class Setting(BaseModel):
    key: str
    value: Any
    updated_at: datetime = Field(default_factory=utcnow)

# --- Analytics ---

class AnalyticsEvent(BaseModel):
    id: UUID = Field(default_factory=uuid4)
    session_id: str
    user_id: str | None = None
    path: str
    event: str = "pageview"
    referrer: str | None = None
    country: str | None = None
    city: str | None = None
    device_type: str | None = None
    browser: str | None = None
    os: str | None = None
    language: str | None = None
    tool_name: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime = Field(default_factory=utcnow)
