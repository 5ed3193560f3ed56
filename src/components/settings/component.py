"""
Settings component - admin key/value settings.

Values are arbitrary JSON documents; the client owns their shape and its
defaults, so a missing key reads as None rather than an error.
"""

from __future__ import annotations

import logging

from src.domain.entities import Setting

from .models import (
    DeleteSettingInput,
    DeleteSettingOutput,
    GetSettingInput,
    GetSettingOutput,
    ListSettingsInput,
    ListSettingsOutput,
    UpsertSettingInput,
    UpsertSettingOutput,
    ValidationError,
)
from .ports import SettingsRepoPort, TimePort

logger = logging.getLogger(__name__)

MAX_KEY_LENGTH = 100


def _validate_key(key: str) -> list[ValidationError]:
    if not key or not key.strip():
        return [ValidationError(field="key", code="required", message="Key is required")]
    if len(key) > MAX_KEY_LENGTH:
        return [
            ValidationError(
                field="key",
                code="max_length",
                message=f"Key must not exceed {MAX_KEY_LENGTH} characters",
            )
        ]
    return []


# --- Component Entry Points ---


def run_list(inp: ListSettingsInput, *, repo: SettingsRepoPort) -> ListSettingsOutput:
    """Get every setting, e.g. for backup/export."""
    return ListSettingsOutput(values={s.key: s.value for s in repo.list_all()})


def run_get(inp: GetSettingInput, *, repo: SettingsRepoPort) -> GetSettingOutput:
    setting = repo.get(inp.key)
    if setting is None:
        return GetSettingOutput(key=inp.key)
    return GetSettingOutput(key=inp.key, value=setting.value, found=True)


def run_upsert(
    inp: UpsertSettingInput,
    *,
    repo: SettingsRepoPort,
    time: TimePort,
) -> UpsertSettingOutput:
    """
    Create or update a setting.

    Args:
        inp: Key and the JSON value to store.
        repo: Settings repository port.
        time: Clock used for updated_at.

    Returns:
        UpsertSettingOutput with the stored setting or validation errors.
    """
    errors = _validate_key(inp.key)
    if errors:
        return UpsertSettingOutput(errors=errors, success=False)

    saved = repo.upsert(Setting(key=inp.key, value=inp.value, updated_at=time.now_utc()))
    logger.info("Setting updated: %s", inp.key)
    return UpsertSettingOutput(setting=saved)


def run_delete(inp: DeleteSettingInput, *, repo: SettingsRepoPort) -> DeleteSettingOutput:
    if not repo.delete(inp.key):
        return DeleteSettingOutput(
            errors=[
                ValidationError(field="key", code="not_found", message="Setting not found")
            ],
            success=False,
        )
    logger.info("Setting deleted: %s", inp.key)
    return DeleteSettingOutput()
