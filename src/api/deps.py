import os
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.clock import SystemClock
from src.adapters.fs.filestore import FileSystemStore
from src.adapters.http.revalidate import HttpRevalidationNotifier, NoOpNotifier
from src.adapters.images.webp import WebPVariantProcessor
from src.adapters.sqlite.repos import (
    SQLiteAnalyticsRepo,
    SQLitePostRepo,
    SQLiteSettingRepo,
    SQLiteUserRepo,
)
from src.app_shell.rate_limit import RateLimiter
from src.components.auth import VerifyTokenInput, run_verify_token
from src.domain.entities import User
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parents[2]
DEV_SECRET_KEY = "dev-secret-unsafe"


# --- Settings ---
class Settings:
    def __init__(self) -> None:
        self.base_dir = PROJECT_ROOT
        self.data_dir = Path(os.environ.get("BLOG_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "blog.db")
        self.uploads_dir = self.data_dir / "uploads"
        self.rules_path = Path(os.environ.get("BLOG_RULES_PATH", str(PROJECT_ROOT / "rules.yaml")))
        self.migrations_dir = PROJECT_ROOT / "migrations"
        self.secret_key = os.environ.get("BLOG_SECRET_KEY", DEV_SECRET_KEY)
        self.frontend_url = os.environ.get("FRONTEND_URL", "http://localhost:3000")
        self.revalidate_token = os.environ.get("REVALIDATE_TOKEN", "")
        self.cors_origins = [
            origin.strip()
            for origin in os.environ.get("CORS_ORIGIN", "http://localhost:3000").split(",")
            if origin.strip()
        ]


@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def _load_rules_cached(path: Path) -> Rules:
    return load_rules(path)


def get_rules(settings: Settings = Depends(get_settings)) -> Rules:
    return _load_rules_cached(settings.rules_path)


# --- Repos ---
def get_post_repo(settings: Settings = Depends(get_settings)) -> SQLitePostRepo:
    return SQLitePostRepo(settings.db_path)


def get_user_repo(settings: Settings = Depends(get_settings)) -> SQLiteUserRepo:
    return SQLiteUserRepo(settings.db_path)


def get_setting_repo(settings: Settings = Depends(get_settings)) -> SQLiteSettingRepo:
    return SQLiteSettingRepo(settings.db_path)


def get_analytics_repo(settings: Settings = Depends(get_settings)) -> SQLiteAnalyticsRepo:
    return SQLiteAnalyticsRepo(settings.db_path)


# --- Adapters ---
def get_file_store(settings: Settings = Depends(get_settings)) -> FileSystemStore:
    return FileSystemStore(base_path=settings.uploads_dir)


def get_image_processor(rules: Rules = Depends(get_rules)) -> WebPVariantProcessor:
    return WebPVariantProcessor(rules.uploads.variants)


def get_auth_adapter(settings: Settings = Depends(get_settings)) -> JWTAuthAdapter:
    return JWTAuthAdapter(settings.secret_key)


def build_notifier(
    settings: Settings, rules: Rules
) -> HttpRevalidationNotifier | NoOpNotifier:
    """Revalidation notifier for the publish sweep; a no-op when disabled in rules."""
    if not rules.revalidation.enabled:
        return NoOpNotifier()
    return HttpRevalidationNotifier(
        frontend_url=settings.frontend_url,
        token=settings.revalidate_token,
        path=rules.revalidation.path,
        timeout_seconds=rules.revalidation.timeout_seconds,
    )


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# Rate limiter keeps its history in process memory, so one instance serves all requests
_rate_limiter_instance: RateLimiter | None = None


def get_rate_limiter(rules: Rules = Depends(get_rules)) -> RateLimiter:
    """Get rate limiter singleton."""
    global _rate_limiter_instance
    if _rate_limiter_instance is None:
        _rate_limiter_instance = RateLimiter(rules.rate_limits)
    return _rate_limiter_instance


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
) -> User:
    if not token:
        raise _unauthorized("No token provided")

    result = run_verify_token(VerifyTokenInput(token=token), user_repo, auth_adapter)
    if not result.success or result.user is None:
        raise _unauthorized(result.error or "Invalid token")

    return result.user


def get_optional_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
    user_repo: SQLiteUserRepo = Depends(get_user_repo),
    auth_adapter: JWTAuthAdapter = Depends(get_auth_adapter),
) -> User | None:
    """Current user for endpoints that are public but reveal more to editors."""
    if not token:
        return None
    result = run_verify_token(VerifyTokenInput(token=token), user_repo, auth_adapter)
    return result.user if result.success else None


def require_admin(user: User = Depends(get_current_user)) -> User:
    if user.role != "admin":
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user
