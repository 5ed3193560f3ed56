from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.api.deps import (
    get_auth_adapter,
    get_clock,
    get_current_user,
    get_optional_user,
    get_rate_limiter,
    get_rules,
    get_user_repo,
)
from src.api.schemas import LoginRequest, RegisterRequest, user_json
from src.app_shell.rate_limit import RateLimiter
from src.components.analytics import client_ip
from src.components.auth import LoginInput, RegisterInput, run_login, run_register
from src.domain.entities import User
from src.rules.models import Rules

router = APIRouter()

_REGISTER_STATUS = {
    "forbidden": status.HTTP_403_FORBIDDEN,
    "email_taken": status.HTTP_409_CONFLICT,
    "invalid": status.HTTP_400_BAD_REQUEST,
}


@router.post("/login")
def login(
    req: LoginRequest,
    request: Request,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    limiter: RateLimiter = Depends(get_rate_limiter),
    rules: Rules = Depends(get_rules),
) -> dict[str, Any]:
    """Authenticate with email/password and return a bearer token."""
    ip = client_ip(request.headers, request.client.host if request.client else None)
    if not limiter.check_login(ip):
        retry = limiter.retry_after(f"login:{ip}", rules.rate_limits.login.window_seconds)
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts, try again later",
            headers={"Retry-After": str(retry)},
        )

    result = run_login(LoginInput(email=req.email, password=req.password), user_repo, auth_adapter, rules.auth)
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=result.error or "Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return {"success": True, "data": {"token": result.token_raw, "user": user_json(result.user)}}


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    actor: User | None = Depends(get_optional_user),
) -> dict[str, Any]:
    """Create an account. Open until the first user exists, then admin-only."""
    result = run_register(
        RegisterInput(
            email=req.email,
            password=req.password,
            name=req.name,
            role=req.role,
            actor=actor,
        ),
        user_repo,
        auth_adapter,
        rules.auth,
        clock,
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=_REGISTER_STATUS.get(result.code or "", status.HTTP_400_BAD_REQUEST),
            detail=result.error or "Registration failed",
        )

    return {"success": True, "data": user_json(result.user)}


@router.get("/me")
def read_users_me(
    current_user: User = Depends(get_current_user),
) -> dict[str, Any]:
    """Get current user info."""
    return {"success": True, "data": user_json(current_user)}
