from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from src.adapters.clock import SystemClock
from src.adapters.fs.filestore import FileSystemStore
from src.adapters.images.webp import WebPVariantProcessor
from src.api.deps import (
    get_clock,
    get_current_user,
    get_file_store,
    get_image_processor,
    get_rate_limiter,
    get_rules,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.uploads import DeleteUploadInput, UploadImageInput, run_delete, run_upload
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()

_UPLOAD_STATUS = {
    "too_large": status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    "rate_limited": status.HTTP_429_TOO_MANY_REQUESTS,
}

_DELETE_STATUS = {
    "not_found": status.HTTP_404_NOT_FOUND,
}


@router.post("", status_code=status.HTTP_201_CREATED)
def upload_image(
    image: UploadFile | None = File(None),
    store: FileSystemStore = Depends(get_file_store),
    processor: WebPVariantProcessor = Depends(get_image_processor),
    limiter: RateLimiter = Depends(get_rate_limiter),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    """Upload one image; stores WebP variants and returns their URLs."""
    # One byte past the cap is enough to reject an oversized file
    data = image.file.read(rules.uploads.max_upload_bytes + 1) if image is not None else b""

    result = run_upload(
        UploadImageInput(
            filename=(image.filename or "") if image is not None else "",
            content_type=image.content_type if image is not None else None,
            data=data,
            user_id=str(user.id),
        ),
        store=store,
        processor=processor,
        limiter=limiter,
        rules=rules.uploads,
        time=clock,
    )
    if not result.success:
        err = result.errors[0]
        raise HTTPException(
            status_code=_UPLOAD_STATUS.get(err.code, status.HTTP_400_BAD_REQUEST),
            detail=err.message,
        )

    return {
        "success": True,
        "data": {
            "filename": result.filename,
            "url": result.url,
            "thumbnailUrl": result.thumbnail_url,
            "responsiveImages": result.responsive_images,
            "sizes": result.sizes,
            "mimetype": result.mimetype,
        },
    }


@router.delete("/{filename}")
def delete_image(
    filename: str,
    store: FileSystemStore = Depends(get_file_store),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    result = run_delete(DeleteUploadInput(filename=filename), store=store)
    if not result.success:
        err = result.errors[0]
        raise HTTPException(
            status_code=_DELETE_STATUS.get(err.code, status.HTTP_400_BAD_REQUEST),
            detail=err.message,
        )
    return {"success": True, "message": "File deleted successfully"}
