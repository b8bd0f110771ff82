"""
Auth component - Registration, login and session management.

Handles accounts, sessions, profile edits and password changes.
"""

from .component import (
    run_change_password,
    run_create_session,
    run_login,
    run_logout,
    run_register,
    run_update_profile,
    run_verify_session,
)
from .models import (
    INVALID_CREDENTIALS,
    NOT_AUTHENTICATED,
    USERNAME_TAKEN,
    VALIDATION,
    AuthOutput,
    ChangePasswordInput,
    CreateSessionInput,
    LoginInput,
    LogoutInput,
    RegisterInput,
    UpdateProfileInput,
    UserOutput,
    VerifySessionInput,
)
from .ports import AuthAdapterPort, SessionStorePort, TimePort, UserRepoPort

__all__ = [
    # Entry points
    "run_change_password",
    "run_create_session",
    "run_login",
    "run_logout",
    "run_register",
    "run_update_profile",
    "run_verify_session",
    # Models
    "INVALID_CREDENTIALS",
    "NOT_AUTHENTICATED",
    "USERNAME_TAKEN",
    "VALIDATION",
    "AuthOutput",
    "ChangePasswordInput",
    "CreateSessionInput",
    "LoginInput",
    "LogoutInput",
    "RegisterInput",
    "UpdateProfileInput",
    "UserOutput",
    "VerifySessionInput",
    # Ports
    "AuthAdapterPort",
    "SessionStorePort",
    "TimePort",
    "UserRepoPort",
]
