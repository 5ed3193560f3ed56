from __future__ import annotations

from datetime import UTC, datetime
from typing import Any
from uuid import UUID

import pytest

from src.api.auth_utils import InvalidTokenError, TokenExpiredError
from src.components.auth import (
    LoginInput,
    RegisterInput,
    VerifyTokenInput,
    run_login,
    run_register,
    run_verify_token,
)
from src.domain.entities import User
from src.rules.models import AuthRules

NOW = datetime(2025, 6, 1, tzinfo=UTC)


class MockUserRepo:
    def __init__(self) -> None:
        self.users: dict[UUID, User] = {}

    def get_by_email(self, email: str) -> User | None:
        for user in self.users.values():
            if user.email.lower() == email.lower():
                return user
        return None

    def get_by_id(self, user_id: Any) -> User | None:
        return self.users.get(user_id)

    def save(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def count(self) -> int:
        return len(self.users)


class FakeAuthAdapter:
    """Plain-text 'hashes' and opaque tokens."""

    def __init__(self) -> None:
        self.expired: set[str] = set()

    def hash_password(self, plain: str) -> str:
        return f"hashed:{plain}"

    def verify_password(self, plain: str, hashed: str) -> bool:
        return hashed == f"hashed:{plain}"

    def create_token(self, user: User, ttl_minutes: int) -> str:
        return f"token:{user.id}"

    def decode_token(self, token: str) -> dict[str, Any]:
        if token in self.expired:
            raise TokenExpiredError("Token expired")
        if not token.startswith("token:"):
            raise InvalidTokenError("Invalid token")
        return {"sub": token.removeprefix("token:")}


class FakeTime:
    def now_utc(self) -> datetime:
        return NOW


@pytest.fixture
def repo():
    return MockUserRepo()


@pytest.fixture
def adapter():
    return FakeAuthAdapter()


@pytest.fixture
def auth_rules():
    return AuthRules()


def _register(repo, adapter, rules, actor=None, **overrides):
    fields = dict(email="ada@example.com", password="correct-horse", name="Ada")
    fields.update(overrides)
    return run_register(RegisterInput(actor=actor, **fields), repo, adapter, rules, FakeTime())


class TestRegister:
    def test_first_user_becomes_admin(self, repo, adapter, auth_rules):
        out = _register(repo, adapter, auth_rules, role="editor")

        assert out.success is True
        assert out.user.role == "admin"
        assert out.user.password_hash == "hashed:correct-horse"
        assert out.user.created_at == NOW

    def test_later_registration_requires_admin(self, repo, adapter, auth_rules):
        admin = _register(repo, adapter, auth_rules).user

        anonymous = _register(repo, adapter, auth_rules, email="bob@example.com")
        assert anonymous.success is False
        assert anonymous.code == "forbidden"

        by_admin = _register(repo, adapter, auth_rules, actor=admin, email="bob@example.com")
        assert by_admin.success is True
        assert by_admin.user.role == "editor"

    def test_editor_cannot_register_users(self, repo, adapter, auth_rules):
        admin = _register(repo, adapter, auth_rules).user
        editor = _register(repo, adapter, auth_rules, actor=admin, email="ed@example.com").user

        out = _register(repo, adapter, auth_rules, actor=editor, email="x@example.com")
        assert out.code == "forbidden"

    @pytest.mark.parametrize(
        "overrides",
        [{"email": "not-an-email"}, {"name": "  "}, {"password": "short"}],
    )
    def test_invalid_input(self, repo, adapter, auth_rules, overrides):
        out = _register(repo, adapter, auth_rules, **overrides)
        assert out.success is False
        assert out.code == "invalid"
        assert repo.count() == 0

    def test_unknown_role(self, repo, adapter, auth_rules):
        admin = _register(repo, adapter, auth_rules).user
        out = _register(repo, adapter, auth_rules, actor=admin, email="z@example.com",
                        role="owner")
        assert out.code == "invalid"

    def test_duplicate_email(self, repo, adapter, auth_rules):
        admin = _register(repo, adapter, auth_rules).user
        out = _register(repo, adapter, auth_rules, actor=admin, email="ADA@example.com")
        assert out.code == "email_taken"


class TestLogin:
    def test_success_returns_token(self, repo, adapter, auth_rules):
        user = _register(repo, adapter, auth_rules).user
        out = run_login(LoginInput(email="ada@example.com", password="correct-horse"),
                        repo, adapter, auth_rules)

        assert out.success is True
        assert out.token_raw == f"token:{user.id}"

    @pytest.mark.parametrize(
        ("email", "password"),
        [("ada@example.com", "wrong"), ("nobody@example.com", "correct-horse")],
    )
    def test_failures_are_indistinguishable(self, repo, adapter, auth_rules, email, password):
        _register(repo, adapter, auth_rules)
        out = run_login(LoginInput(email=email, password=password), repo, adapter, auth_rules)

        assert out.success is False
        assert out.error == "Invalid credentials"


class TestVerifyToken:
    def test_valid(self, repo, adapter, auth_rules):
        user = _register(repo, adapter, auth_rules).user
        out = run_verify_token(VerifyTokenInput(token=f"token:{user.id}"), repo, adapter)
        assert out.success is True
        assert out.user == user

    def test_expired(self, repo, adapter, auth_rules):
        user = _register(repo, adapter, auth_rules).user
        token = f"token:{user.id}"
        adapter.expired.add(token)

        out = run_verify_token(VerifyTokenInput(token=token), repo, adapter)
        assert out.error == "Token expired"

    def test_garbage(self, repo, adapter):
        assert run_verify_token(VerifyTokenInput(token="junk"), repo, adapter).error == (
            "Invalid token"
        )

    def test_bad_subject(self, repo, adapter):
        out = run_verify_token(VerifyTokenInput(token="token:not-a-uuid"), repo, adapter)
        assert out.error == "Invalid token"

    def test_deleted_user(self, repo, adapter):
        out = run_verify_token(
            VerifyTokenInput(token="token:00000000-0000-0000-0000-000000000001"), repo, adapter
        )
        assert out.error == "User not found"
