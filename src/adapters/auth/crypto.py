from datetime import timedelta
from typing import Any

from src.api.auth_utils import (
    create_access_token,
    decode_access_token,
    get_password_hash,
    verify_password,
)
from src.domain.entities import User


class JWTAuthAdapter:
    """Auth adapter that uses JWT tokens and passlib for password hashing."""

    def __init__(self, secret_key: str) -> None:
        self._secret_key = secret_key

    def hash_password(self, password: str) -> str:
        return get_password_hash(password)

    def verify_password(self, plain: str, hashed: str) -> bool:
        return verify_password(plain, hashed)

    def create_token(self, user: User, ttl_minutes: int) -> str:
        return create_access_token(
            {"sub": str(user.id), "email": user.email, "role": user.role},
            self._secret_key,
            timedelta(minutes=ttl_minutes),
        )

    def decode_token(self, token: str) -> dict[str, Any]:
        """Claims of a valid token. Raises TokenExpiredError / InvalidTokenError."""
        return decode_access_token(token, self._secret_key)
