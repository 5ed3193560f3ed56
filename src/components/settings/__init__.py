"""
Settings component - admin key/value settings.
"""

from .component import run_delete, run_get, run_list, run_upsert
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

__all__ = [
    # Component entry points
    "run_list",
    "run_get",
    "run_upsert",
    "run_delete",
    # Models
    "ListSettingsInput",
    "ListSettingsOutput",
    "GetSettingInput",
    "GetSettingOutput",
    "UpsertSettingInput",
    "UpsertSettingOutput",
    "DeleteSettingInput",
    "DeleteSettingOutput",
    "ValidationError",
    # Ports
    "SettingsRepoPort",
    "TimePort",
]
