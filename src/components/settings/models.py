"""
Settings component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import Setting


@dataclass(frozen=True)
class ValidationError:
    """Validation error with actionable message."""

    field: str
    code: str
    message: str


@dataclass(frozen=True)
class ListSettingsInput:
    """Input for listing all settings."""

    pass


@dataclass(frozen=True)
class ListSettingsOutput:
    """All settings as a key -> value mapping."""

    values: dict[str, Any]


@dataclass(frozen=True)
class GetSettingInput:
    key: str


@dataclass(frozen=True)
class GetSettingOutput:
    """value is None when the key has never been set."""

    key: str
    value: Any = None
    found: bool = False


@dataclass(frozen=True)
class UpsertSettingInput:
    key: str
    value: Any


@dataclass(frozen=True)
class UpsertSettingOutput:
    setting: Setting | None = None
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class DeleteSettingInput:
    key: str


@dataclass(frozen=True)
class DeleteSettingOutput:
    errors: list[ValidationError] = field(default_factory=list)
    success: bool = True
