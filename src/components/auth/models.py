from dataclasses import dataclass

from src.domain.entities import User


@dataclass
class LoginInput:
    email: str
    password: str


@dataclass
class RegisterInput:
    email: str
    password: str
    name: str
    role: str = "editor"
    # None while bootstrapping the first account
    actor: User | None = None


@dataclass
class VerifyTokenInput:
    token: str


@dataclass
class AuthOutput:
    user: User | None = None
    token_raw: str | None = None
    success: bool = False
    error: str | None = None


@dataclass
class UserOutput:
    """code: forbidden | invalid | email_taken when success is False."""

    user: User | None = None
    success: bool = False
    error: str | None = None
    code: str | None = None
