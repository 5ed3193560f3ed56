"""
Analytics API.

Tracking is public and never fails the page: filtered events still answer
200 with tracked=false. Statistics require a token.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteAnalyticsRepo
from src.api.deps import get_analytics_repo, get_clock, get_current_user, get_rate_limiter, get_rules
from src.api.schemas import TrackRequestBody
from src.app_shell.rate_limit import RateLimiter
from src.components.analytics import (
    StatsInput,
    TrackEventInput,
    TrackRequest,
    client_ip,
    run_realtime,
    run_stats,
    run_track,
)
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()


@router.post("/track")
def track(
    body: TrackRequestBody,
    request: Request,
    repo: SQLiteAnalyticsRepo = Depends(get_analytics_repo),
    limiter: RateLimiter = Depends(get_rate_limiter),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
) -> dict[str, Any]:
    meta = TrackRequest(
        ip=client_ip(request.headers, request.client.host if request.client else None),
        user_agent=request.headers.get("user-agent", ""),
        accept_language=request.headers.get("accept-language"),
        referer=request.headers.get("referer"),
    )
    result = run_track(
        TrackEventInput(
            request=meta,
            path=body.path,
            event=body.event,
            referrer=body.referrer,
            session_id=body.session_id,
            user_id=body.user_id,
            language=body.language,
            tool_name=body.tool_name,
            metadata=body.metadata,
        ),
        store=repo,
        limiter=limiter,
        rules=rules.analytics,
        time=clock,
    )
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors[0].message)

    response: dict[str, Any] = {"success": True, "tracked": result.tracked}
    if result.reason:
        response["reason"] = result.reason
    if result.session_id:
        response["sessionId"] = result.session_id
    return response


@router.get("/stats")
def stats(
    type: str = "overview",
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    repo: SQLiteAnalyticsRepo = Depends(get_analytics_repo),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    result = run_stats(
        StatsInput(type=type, start_date=start_date, end_date=end_date),
        repo=repo,
        rules=rules.analytics,
        time=clock,
    )
    if not result.success:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.errors[0].message)
    return {"success": True, "data": result.data}


@router.get("/realtime")
def realtime(
    repo: SQLiteAnalyticsRepo = Depends(get_analytics_repo),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    user: User = Depends(get_current_user),
) -> dict[str, Any]:
    result = run_realtime(repo=repo, rules=rules.analytics, time=clock)
    return {"success": True, "data": {"activeUsers": result.active_users}}
