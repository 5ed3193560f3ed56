import logging
from typing import cast
from uuid import UUID, uuid4

from src.api.auth_utils import TokenError
from src.domain.entities import RoleType, User
from src.domain.errors import DuplicateEmailError
from src.rules.models import AuthRules

from .models import AuthOutput, LoginInput, RegisterInput, UserOutput, VerifyTokenInput
from .ports import AuthAdapterPort, TimePort, UserRepoPort

logger = logging.getLogger(__name__)


def run_login(
    inp: LoginInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    rules: AuthRules,
) -> AuthOutput:
    user = user_repo.get_by_email(inp.email.strip())
    if not user:
        return AuthOutput(success=False, error="Invalid credentials")

    if not auth_adapter.verify_password(inp.password, user.password_hash):
        return AuthOutput(success=False, error="Invalid credentials")

    token = auth_adapter.create_token(user, rules.token_ttl_minutes)
    logger.info("User logged in: %s", user.email)
    return AuthOutput(user=user, token_raw=token, success=True)


def run_verify_token(
    inp: VerifyTokenInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
) -> AuthOutput:
    try:
        claims = auth_adapter.decode_token(inp.token)
    except TokenError as e:
        return AuthOutput(success=False, error=str(e))

    try:
        user_id = UUID(str(claims.get("sub")))
    except ValueError:
        return AuthOutput(success=False, error="Invalid token")

    user = user_repo.get_by_id(user_id)
    if not user:
        return AuthOutput(success=False, error="User not found")

    return AuthOutput(user=user, token_raw=inp.token, success=True)


def run_register(
    inp: RegisterInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    rules: AuthRules,
    time: TimePort,
) -> UserOutput:
    # Open registration only until the first account exists
    bootstrapping = user_repo.count() == 0
    if not bootstrapping and (inp.actor is None or inp.actor.role != "admin"):
        return UserOutput(success=False, error="Access denied", code="forbidden")

    email = inp.email.strip()
    if "@" not in email:
        return UserOutput(success=False, error="Invalid email address", code="invalid")
    if not inp.name.strip():
        return UserOutput(success=False, error="Name is required", code="invalid")
    if len(inp.password) < rules.min_password_length:
        return UserOutput(
            success=False,
            error=f"Password must be at least {rules.min_password_length} characters",
            code="invalid",
        )

    # The first account is always an admin
    role = "admin" if bootstrapping else inp.role
    if role not in rules.roles:
        return UserOutput(
            success=False,
            error=f"Role must be one of: {', '.join(rules.roles)}",
            code="invalid",
        )

    if user_repo.get_by_email(email):
        return UserOutput(success=False, error="Email already in use", code="email_taken")

    now = time.now_utc()
    new_user = User(
        id=uuid4(),
        email=email,
        name=inp.name.strip(),
        password_hash=auth_adapter.hash_password(inp.password),
        role=cast(RoleType, role),
        created_at=now,
        updated_at=now,
    )
    try:
        user_repo.save(new_user)
    except DuplicateEmailError:
        return UserOutput(success=False, error="Email already in use", code="email_taken")

    logger.info("User registered: %s (%s)", new_user.email, new_user.role)
    return UserOutput(user=new_user, success=True)
