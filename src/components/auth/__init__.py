"""
Auth component - Authentication and user registration.

Handles login, bearer token verification, and account creation.
"""

from .component import run_login, run_register, run_verify_token
from .models import AuthOutput, LoginInput, RegisterInput, UserOutput, VerifyTokenInput
from .ports import AuthAdapterPort, TimePort, UserRepoPort

__all__ = [
    # Entry points
    "run_login",
    "run_register",
    "run_verify_token",
    # Models
    "AuthOutput",
    "LoginInput",
    "RegisterInput",
    "UserOutput",
    "VerifyTokenInput",
    # Ports
    "AuthAdapterPort",
    "UserRepoPort",
    "TimePort",
]
