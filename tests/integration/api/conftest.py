from __future__ import annotations

from collections.abc import Iterator
from datetime import UTC, datetime
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.adapters.auth.crypto import JWTAuthAdapter
from src.adapters.sqlite.repos import SQLiteUserRepo
from src.api import deps
from src.api.auth_utils import get_password_hash
from src.api.deps import Settings, get_settings
from src.api.main import app
from src.domain.entities import User

ADMIN_PASSWORD = "admin-password"


@pytest.fixture
def api_settings(tmp_path: Path) -> Settings:
    s = Settings()
    s.data_dir = tmp_path / "data"
    s.db_path = str(s.data_dir / "blog.db")
    s.uploads_dir = s.data_dir / "uploads"
    s.secret_key = "test-secret-key"
    return s


@pytest.fixture
def client(api_settings: Settings) -> Iterator[TestClient]:
    app.dependency_overrides[get_settings] = lambda: api_settings
    deps._rate_limiter_instance = None
    # Entering the client runs the lifespan: migrations, scheduler start/stop
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    deps._rate_limiter_instance = None


def _make_user(settings: Settings, email: str, role: str) -> User:
    now = datetime.now(UTC)
    user = User(
        email=email,
        password_hash=get_password_hash(ADMIN_PASSWORD),
        name=email.split("@")[0].title(),
        role=role,
        created_at=now,
        updated_at=now,
    )
    return SQLiteUserRepo(settings.db_path).save(user)


@pytest.fixture
def admin_user(client: TestClient, api_settings: Settings) -> User:
    return _make_user(api_settings, "admin@example.com", "admin")


@pytest.fixture
def editor_user(client: TestClient, api_settings: Settings) -> User:
    return _make_user(api_settings, "editor@example.com", "editor")


def bearer(settings: Settings, user: User) -> dict[str, str]:
    token = JWTAuthAdapter(settings.secret_key).create_token(user, ttl_minutes=60)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(api_settings: Settings, admin_user: User) -> dict[str, str]:
    return bearer(api_settings, admin_user)


@pytest.fixture
def editor_headers(api_settings: Settings, editor_user: User) -> dict[str, str]:
    return bearer(api_settings, editor_user)
