import logging
from datetime import timedelta
from typing import Any

from src.domain.entities import InsertUser, Session
from src.domain.validation import FieldError
from src.rules.models import AuthRules

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

logger = logging.getLogger(__name__)

# Wire name -> field name for the profile fields a user may edit
PROFILE_FIELDS = {
    "companyName": "company_name",
    "company_name": "company_name",
    "businessType": "business_type",
    "business_type": "business_type",
    "webLink": "web_link",
    "web_link": "web_link",
    "logo": "logo",
}


def _too_short(path: str, label: str, minimum: int) -> FieldError:
    return FieldError(
        path=(path,),
        message=f"{label} must be at least {minimum} characters",
        code="too_short",
    )


def _required(path: str, label: str) -> FieldError:
    return FieldError(path=(path,), message=f"{label} is required", code="missing")


def run_register(
    inp: RegisterInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    rules: AuthRules,
) -> UserOutput:
    errors: list[FieldError] = []
    if len(inp.username) < rules.username_min_length:
        errors.append(_too_short("username", "Username", rules.username_min_length))
    if len(inp.password) < rules.password_min_length:
        errors.append(_too_short("password", "Password", rules.password_min_length))
    if not inp.company_name.strip():
        errors.append(_required("companyName", "Company name"))
    if errors:
        return UserOutput(success=False, error=VALIDATION, errors=errors)

    if user_repo.get_by_username(inp.username):
        return UserOutput(success=False, error=USERNAME_TAKEN)

    user = user_repo.create(
        InsertUser(
            username=inp.username,
            password=auth_adapter.hash_password(inp.password),
            company_name=inp.company_name,
            business_type=inp.business_type,
            web_link=inp.web_link,
            logo=inp.logo,
        )
    )
    logger.info("Registered user %s (%s)", user.id, user.username)
    return UserOutput(user=user, success=True)


def run_login(
    inp: LoginInput, user_repo: UserRepoPort, auth_adapter: AuthAdapterPort
) -> AuthOutput:
    user = user_repo.get_by_username(inp.username)
    if not user or not auth_adapter.verify_password(inp.password, user.password):
        logger.warning("Failed login for username %r", inp.username)
        return AuthOutput(success=False, error=INVALID_CREDENTIALS)

    return AuthOutput(user=user, success=True)


def run_create_session(
    inp: CreateSessionInput,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    time: TimePort,
    rules: AuthRules,
) -> AuthOutput:
    ttl_minutes = rules.sessions.ttl_minutes
    token = auth_adapter.create_token(inp.user.id, ttl_minutes)
    token_hash = auth_adapter.hash_token(token)
    now = time.now_utc()

    session = Session(
        user_id=inp.user.id,
        token_hash=token_hash,
        expires_at=now + timedelta(minutes=ttl_minutes),
        created_at=now,
    )
    session_store.save(token_hash, session)
    return AuthOutput(user=inp.user, session=session, token_raw=token, success=True)


def run_verify_session(
    inp: VerifySessionInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    time: TimePort,
) -> AuthOutput:
    subject = auth_adapter.validate_token(inp.token)
    if subject is None:
        return AuthOutput(success=False, error=NOT_AUTHENTICATED)

    token_hash = auth_adapter.hash_token(inp.token)
    session = session_store.get(token_hash)
    if not session:
        return AuthOutput(success=False, error=NOT_AUTHENTICATED)

    if session.expires_at <= time.now_utc():
        session_store.delete(token_hash)
        return AuthOutput(success=False, error=NOT_AUTHENTICATED)

    if str(session.user_id) != str(subject):
        return AuthOutput(success=False, error=NOT_AUTHENTICATED)

    user = user_repo.get(session.user_id)
    if not user:
        return AuthOutput(success=False, error=NOT_AUTHENTICATED)

    return AuthOutput(user=user, session=session, success=True)


def run_logout(
    inp: LogoutInput, auth_adapter: AuthAdapterPort, session_store: SessionStorePort
) -> AuthOutput:
    session_store.delete(auth_adapter.hash_token(inp.token))
    return AuthOutput(success=True)


def run_update_profile(inp: UpdateProfileInput, user_repo: UserRepoPort) -> UserOutput:
    """Apply profile edits. Keys outside the profile fields are ignored."""
    changes: dict[str, Any] = {
        PROFILE_FIELDS[key]: value for key, value in inp.changes.items() if key in PROFILE_FIELDS
    }

    if "company_name" in changes:
        name = changes["company_name"]
        if not isinstance(name, str) or not name.strip():
            return UserOutput(
                success=False,
                error=VALIDATION,
                errors=[_required("companyName", "Company name")],
            )
    for key, value in changes.items():
        if value is not None and not isinstance(value, str):
            return UserOutput(
                success=False,
                error=VALIDATION,
                errors=[
                    FieldError(path=(key,), message="Input should be a string", code="string_type")
                ],
            )

    if not changes:
        return UserOutput(user=inp.user, success=True)

    user = user_repo.update(inp.user.id, changes)
    if user is None:
        return UserOutput(success=False, error=NOT_AUTHENTICATED)
    return UserOutput(user=user, success=True)


def run_change_password(
    inp: ChangePasswordInput,
    user_repo: UserRepoPort,
    auth_adapter: AuthAdapterPort,
    session_store: SessionStorePort,
    rules: AuthRules,
) -> UserOutput:
    """Replace the password and revoke every other session of the user."""
    if not auth_adapter.verify_password(inp.current_password, inp.user.password):
        return UserOutput(success=False, error=INVALID_CREDENTIALS)

    if len(inp.new_password) < rules.password_min_length:
        return UserOutput(
            success=False,
            error=VALIDATION,
            errors=[_too_short("newPassword", "Password", rules.password_min_length)],
        )

    user = user_repo.update(inp.user.id, {"password": auth_adapter.hash_password(inp.new_password)})
    if user is None:
        return UserOutput(success=False, error=NOT_AUTHENTICATED)

    kept: tuple[str, Session] | None = None
    if inp.keep_token:
        keep_hash = auth_adapter.hash_token(inp.keep_token)
        current = session_store.get(keep_hash)
        if current is not None and current.user_id == user.id:
            kept = (keep_hash, current)

    revoked = session_store.delete_by_user(user.id)
    if kept is not None:
        session_store.save(*kept)
        revoked -= 1
    logger.info("Password changed for user %s; revoked %s other session(s)", user.id, revoked)
    return UserOutput(user=user, success=True)
