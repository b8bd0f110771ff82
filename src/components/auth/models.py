from dataclasses import dataclass, field
from typing import Any

from src.domain.entities import Session, User
from src.domain.validation import FieldError

# Error codes surfaced to the shell layer
USERNAME_TAKEN = "username_taken"
INVALID_CREDENTIALS = "invalid_credentials"
NOT_AUTHENTICATED = "not_authenticated"
VALIDATION = "validation"


@dataclass
class RegisterInput:
    username: str
    password: str
    company_name: str
    business_type: str | None = None
    web_link: str | None = None
    logo: str | None = None


@dataclass
class LoginInput:
    username: str
    password: str


@dataclass
class CreateSessionInput:
    user: User


@dataclass
class VerifySessionInput:
    token: str


@dataclass
class LogoutInput:
    token: str


@dataclass
class UpdateProfileInput:
    user: User
    changes: dict[str, Any]


@dataclass
class ChangePasswordInput:
    user: User
    current_password: str
    new_password: str
    # Session that stays valid after the change (the caller's own)
    keep_token: str | None = None


@dataclass
class AuthOutput:
    user: User | None = None
    session: Session | None = None
    token_raw: str | None = None
    success: bool = False
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)


@dataclass
class UserOutput:
    user: User | None = None
    success: bool = False
    error: str | None = None
    errors: list[FieldError] = field(default_factory=list)
