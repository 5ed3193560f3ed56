from typing import Literal

from pydantic import BaseModel, Field


class ContentRules(BaseModel):
    languages: list[str]
    default_language: str
    slug_pattern: str
    default_author: str = "Editorial Team"
    default_read_time: str = "5 min"
    title_max: int = 200


class AuthRules(BaseModel):
    token_ttl_minutes: int = 60 * 24 * 7
    min_password_length: int = 8
    roles: list[str] = Field(default_factory=lambda: ["admin", "editor"])


class SchedulingRules(BaseModel):
    enabled: bool = True
    sweep_interval_seconds: float = 60.0


class RevalidationRules(BaseModel):
    enabled: bool = True
    path: str = "/blog"
    timeout_seconds: float = 10.0


class RateLimitWindow(BaseModel):
    window_seconds: int
    max_attempts: int | None = None
    max_requests: int | None = None


class AnalyticsRules(BaseModel):
    excluded_ips: list[str] = Field(default_factory=list)
    exclude_tailscale: bool = True
    default_window_days: int = 30
    realtime_window_minutes: int = 5
    top_limit: int = 20
    rate_limit: RateLimitWindow = Field(
        default_factory=lambda: RateLimitWindow(window_seconds=60, max_requests=100)
    )


class ImageVariant(BaseModel):
    name: str
    suffix: str = ""
    width: int
    height: int
    fit: Literal["inside", "cover"] = "inside"
    quality: int = 80


class UploadsRules(BaseModel):
    max_upload_bytes: int
    allowlist_extensions: list[str]
    allowlist_mime_types: list[str]
    url_prefix: str = "/uploads"
    variants: list[ImageVariant]


class RateLimitRules(BaseModel):
    login: RateLimitWindow
    upload: RateLimitWindow


class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)


class Rules(BaseModel):
    content: ContentRules
    auth: AuthRules
    scheduling: SchedulingRules
    revalidation: RevalidationRules
    analytics: AnalyticsRules
    uploads: UploadsRules
    rate_limits: RateLimitRules
    ops: OpsRules = Field(default_factory=OpsRules)
