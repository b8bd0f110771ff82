from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.api.deps import (
    get_auth_adapter,
    get_clock,
    get_current_user,
    get_request_token,
    get_rules,
    get_session_store,
    get_user_repo,
)
from src.api.errors import ValidationFailed
from src.api.schemas import LoginRequest, MessageResponse, RegisterRequest, UserResponse
from src.components.auth import (
    USERNAME_TAKEN,
    CreateSessionInput,
    LoginInput,
    LogoutInput,
    RegisterInput,
    run_create_session,
    run_login,
    run_logout,
    run_register,
)
from src.domain.entities import User
from src.domain.validation import FieldError
from src.rules.models import Rules

router = APIRouter()


def start_session(
    response: Response,
    user: User,
    auth_adapter: Any,
    session_store: Any,
    clock: Any,
    rules: Rules,
) -> str:
    """Open a session for user and set the HttpOnly session cookie. Returns the raw token."""
    result = run_create_session(
        CreateSessionInput(user=user),
        auth_adapter=auth_adapter,
        session_store=session_store,
        time=clock,
        rules=rules.auth,
    )
    assert result.token_raw is not None

    sessions = rules.auth.sessions
    max_age = sessions.ttl_minutes * 60
    response.set_cookie(
        key=sessions.cookie.name,
        value=f"Bearer {result.token_raw}",
        httponly=sessions.cookie.http_only,
        max_age=max_age,
        expires=max_age,
        samesite=sessions.cookie.same_site,
        secure=sessions.cookie.secure,
    )
    return result.token_raw


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    req: RegisterRequest,
    response: Response,
    user_repo: Any = Depends(get_user_repo),
    auth_adapter: Any = Depends(get_auth_adapter),
    session_store: Any = Depends(get_session_store),
    clock: Any = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> UserResponse:
    """Create an account and log it in."""
    inp = RegisterInput(
        username=req.username,
        password=req.password,
        company_name=req.company_name,
        business_type=req.business_type,
        web_link=req.web_link,
        logo=req.logo,
    )
    result = run_register(inp, user_repo=user_repo, auth_adapter=auth_adapter, rules=rules.auth)

    if not result.success or result.user is None:
        if result.error == USERNAME_TAKEN:
            raise ValidationFailed(
                [FieldError(path=("username",), message="Username already exists", code=USERNAME_TAKEN)]
            )
        raise ValidationFailed(result.errors)

    start_session(response, result.user, auth_adapter, session_store, clock, rules)
    return UserResponse.model_validate(result.user)


@router.post("/login", response_model=UserResponse)
def login(
    req: LoginRequest,
    response: Response,
    user_repo: Any = Depends(get_user_repo),
    auth_adapter: Any = Depends(get_auth_adapter),
    session_store: Any = Depends(get_session_store),
    clock: Any = Depends(get_clock),
    rules: Rules = Depends(get_rules),
) -> UserResponse:
    """Authenticate and set the session cookie."""
    result = run_login(
        LoginInput(username=req.username, password=req.password),
        user_repo=user_repo,
        auth_adapter=auth_adapter,
    )
    if not result.success or result.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    start_session(response, result.user, auth_adapter, session_store, clock, rules)
    return UserResponse.model_validate(result.user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    token: Annotated[str | None, Depends(get_request_token)],
    auth_adapter: Any = Depends(get_auth_adapter),
    session_store: Any = Depends(get_session_store),
    rules: Rules = Depends(get_rules),
) -> MessageResponse:
    """End the current session (if any) and clear the cookie."""
    if token:
        run_logout(LogoutInput(token=token), auth_adapter=auth_adapter, session_store=session_store)
    response.delete_cookie(key=rules.auth.sessions.cookie.name)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=UserResponse)
def read_current_user(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
