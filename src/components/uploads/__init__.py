"""
Uploads component - responsive WebP image uploads.
"""

from .component import build_base_name, is_allowed_type, run_delete, run_upload
from .models import (
    DeleteUploadInput,
    DeleteUploadOutput,
    UploadError,
    UploadImageInput,
    UploadImageOutput,
)
from .ports import FileStorePort, ImageProcessorPort, TimePort, UploadLimiterPort

__all__ = [
    "run_upload",
    "run_delete",
    "is_allowed_type",
    "build_base_name",
    "UploadImageInput",
    "UploadImageOutput",
    "DeleteUploadInput",
    "DeleteUploadOutput",
    "UploadError",
    "FileStorePort",
    "ImageProcessorPort",
    "UploadLimiterPort",
    "TimePort",
]
