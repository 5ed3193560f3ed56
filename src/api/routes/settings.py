"""
Admin settings API.

Small JSON documents stored by key for admin-configurable toggles.
A missing key reads as null so the client can apply its own defaults.
"""

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteSettingRepo
from src.api.deps import get_clock, get_current_user, get_setting_repo
from src.components.settings import (
    DeleteSettingInput,
    GetSettingInput,
    ListSettingsInput,
    UpsertSettingInput,
    run_delete,
    run_get,
    run_list,
    run_upsert,
)
from src.domain.entities import User

router = APIRouter()


@router.get("")
def list_settings(
    repo: SQLiteSettingRepo = Depends(get_setting_repo),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    """All settings as a key/value object (backup/export)."""
    return {"success": True, "data": run_list(ListSettingsInput(), repo=repo).values}


@router.get("/{key}")
def get_setting(
    key: str,
    repo: SQLiteSettingRepo = Depends(get_setting_repo),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    return {"success": True, "data": run_get(GetSettingInput(key=key), repo=repo).value}


@router.put("/{key}")
def put_setting(
    key: str,
    body: dict[str, Any] = Body(...),
    repo: SQLiteSettingRepo = Depends(get_setting_repo),
    clock: SystemClock = Depends(get_clock),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    # null is a valid value; only an absent key is rejected
    if "value" not in body:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Value is required")

    result = run_upsert(UpsertSettingInput(key=key, value=body["value"]), repo=repo, time=clock)
    if not result.success or result.setting is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors[0].message)
    return {"success": True, "data": result.setting.value}


@router.delete("/{key}")
def delete_setting(
    key: str,
    repo: SQLiteSettingRepo = Depends(get_setting_repo),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    result = run_delete(DeleteSettingInput(key=key), repo=repo)
    if not result.success:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return {"success": True, "message": "Setting deleted"}
