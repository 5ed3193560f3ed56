from datetime import datetime
from typing import Any, Protocol

from src.domain.entities import User


class UserRepoPort(Protocol):
    def get_by_email(self, email: str) -> User | None: ...
    def get_by_id(self, user_id: Any) -> User | None: ...
    def save(self, user: User) -> User: ...
    def count(self) -> int: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def create_token(self, user: User, ttl_minutes: int) -> str: ...
    def decode_token(self, token: str) -> dict[str, Any]: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...
