"""
Uploads component port definitions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from src.adapters.images.webp import ProcessedVariant


class FileStorePort(Protocol):
    def save(self, name: str, data: bytes) -> str:
        ...

    def delete(self, name: str) -> bool:
        """Raises ValueError on a name escaping the store."""
        ...


class ImageProcessorPort(Protocol):
    def process(self, raw_bytes: bytes, base_name: str) -> list[ProcessedVariant]:
        """Raises ValueError if raw_bytes is not a decodable image."""
        ...


class UploadLimiterPort(Protocol):
    def check_upload(self, user_id: str) -> bool:
        ...


class TimePort(Protocol):
    def now_utc(self) -> datetime:
        ...
