"""
Uploads component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class UploadError:
    """
    code: no_file | invalid_type | too_large | invalid_image | rate_limited |
          invalid_name | not_found
    """

    code: str
    message: str


@dataclass(frozen=True)
class UploadImageInput:
    filename: str
    content_type: str | None
    data: bytes
    user_id: str


@dataclass(frozen=True)
class UploadImageOutput:
    filename: str | None = None
    url: str | None = None
    thumbnail_url: str | None = None
    responsive_images: dict[str, str] = field(default_factory=dict)
    sizes: dict[str, int] = field(default_factory=dict)
    mimetype: str = "image/webp"
    errors: list[UploadError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DeleteUploadInput:
    filename: str


@dataclass(frozen=True)
class DeleteUploadOutput:
    errors: list[UploadError] = field(default_factory=list)
    success: bool = True
