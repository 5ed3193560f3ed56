"""
Uploads component - image upload into responsive WebP variants.

The original file is never stored; only the rendered variants are kept.
Guards run in order: rate limit, presence, type allowlist, size cap, decode.
"""

from __future__ import annotations

import logging
import re
import secrets
from pathlib import PurePosixPath

from src.rules.models import UploadsRules

from .models import (
    DeleteUploadInput,
    DeleteUploadOutput,
    UploadError,
    UploadImageInput,
    UploadImageOutput,
)
from .ports import FileStorePort, ImageProcessorPort, TimePort, UploadLimiterPort

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_-]+")
_SAFE_FILENAME = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

RESPONSIVE_VARIANTS = ("small", "medium", "large")


def _fail(code: str, message: str) -> UploadImageOutput:
    return UploadImageOutput(errors=[UploadError(code=code, message=message)], success=False)


def is_allowed_type(filename: str, content_type: str | None, rules: UploadsRules) -> bool:
    """Both the extension and the declared MIME type must be on the allowlist."""
    ext = PurePosixPath(filename).suffix.lower()
    mime = (content_type or "").split(";")[0].strip().lower()
    return ext in rules.allowlist_extensions and mime in rules.allowlist_mime_types


def build_base_name(filename: str, epoch_ms: int) -> str:
    """`{stem}-{epoch_ms}-{random}` with the stem reduced to filename-safe characters."""
    stem = _UNSAFE_CHARS.sub("-", PurePosixPath(filename).stem).strip("-") or "image"
    return f"{stem}-{epoch_ms}-{secrets.randbelow(10**9)}"


def run_upload(
    inp: UploadImageInput,
    *,
    store: FileStorePort,
    processor: ImageProcessorPort,
    limiter: UploadLimiterPort,
    rules: UploadsRules,
    time: TimePort,
) -> UploadImageOutput:
    """
    Validate an uploaded image and store its WebP variants.

    Args:
        inp: Uploaded file and uploader id.
        store: File store for the variants.
        processor: Renders the variants.
        limiter: Per-user upload rate limiter.
        rules: Upload rules (allowlists, size cap, variants, URL prefix).
        time: Time port used for the filename timestamp.

    Returns:
        UploadImageOutput describing the stored variants, or errors.
    """
    if not limiter.check_upload(inp.user_id):
        return _fail("rate_limited", "Too many uploads, try again later")

    if not inp.filename or not inp.data:
        return _fail("no_file", "No file uploaded")

    if not is_allowed_type(inp.filename, inp.content_type, rules):
        return _fail("invalid_type", "Only image files are allowed (jpeg, jpg, png, gif, webp)")

    if len(inp.data) > rules.max_upload_bytes:
        return _fail(
            "too_large", f"File exceeds the maximum size of {rules.max_upload_bytes} bytes"
        )

    epoch_ms = int(time.now_utc().timestamp() * 1000)
    base_name = build_base_name(inp.filename, epoch_ms)

    try:
        variants = processor.process(inp.data, base_name)
    except ValueError as e:
        return _fail("invalid_image", str(e))

    prefix = rules.url_prefix.rstrip("/")
    urls: dict[str, str] = {}
    sizes: dict[str, int] = {}
    for variant in variants:
        store.save(variant.filename, variant.data)
        urls[variant.name] = f"{prefix}/{variant.filename}"
        sizes[variant.name] = variant.size

    main = variants[0]
    logger.info(
        "Image uploaded by %s: %s (%d variants)", inp.user_id, main.filename, len(variants)
    )
    return UploadImageOutput(
        filename=main.filename,
        url=urls[main.name],
        thumbnail_url=urls.get("thumbnail"),
        responsive_images={name: urls[name] for name in RESPONSIVE_VARIANTS if name in urls},
        sizes=sizes,
    )


def run_delete(inp: DeleteUploadInput, *, store: FileStorePort) -> DeleteUploadOutput:
    """Delete a single stored file by name."""
    if not _SAFE_FILENAME.match(inp.filename):
        return DeleteUploadOutput(
            errors=[UploadError(code="invalid_name", message="Invalid filename")],
            success=False,
        )

    try:
        deleted = store.delete(inp.filename)
    except ValueError:
        return DeleteUploadOutput(
            errors=[UploadError(code="invalid_name", message="Invalid filename")],
            success=False,
        )

    if not deleted:
        return DeleteUploadOutput(
            errors=[UploadError(code="not_found", message="File not found")],
            success=False,
        )

    logger.info("Upload deleted: %s", inp.filename)
    return DeleteUploadOutput()
