from functools import lru_cache
from typing import Annotated, Any

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from src.app_shell.config import Settings
from src.components.auth import VerifySessionInput, run_verify_session
from src.domain.entities import User
from src.rules.models import Rules


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Collaborators ---
# create_app puts one instance of each on app.state; routes resolve them per request.
def get_rules(request: Request) -> Rules:
    rules: Rules = request.app.state.rules
    return rules


def get_storage(request: Request) -> Any:
    return request.app.state.storage


def get_user_repo(request: Request) -> Any:
    return request.app.state.storage.users


def get_session_store(request: Request) -> Any:
    return request.app.state.session_store


def get_clock(request: Request) -> Any:
    return request.app.state.clock


def get_auth_adapter(request: Request) -> Any:
    return request.app.state.auth_adapter


# --- Auth ---
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/login", auto_error=False)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_request_token(
    request: Request,
    token: Annotated[str | None, Depends(oauth2_scheme)],
    rules: Rules = Depends(get_rules),
) -> str | None:
    """Raw JWT from the session cookie ("Bearer <jwt>") or the Authorization header."""
    cookie_token = request.cookies.get(rules.auth.sessions.cookie.name)
    if cookie_token and cookie_token.startswith("Bearer "):
        return cookie_token.split(" ", 1)[1]
    return token or None


def get_current_user(
    token: Annotated[str | None, Depends(get_request_token)],
    user_repo: Any = Depends(get_user_repo),
    auth_adapter: Any = Depends(get_auth_adapter),
    session_store: Any = Depends(get_session_store),
    clock: Any = Depends(get_clock),
) -> User:
    if not token:
        raise _unauthorized()

    result = run_verify_session(
        VerifySessionInput(token=token),
        user_repo=user_repo,
        auth_adapter=auth_adapter,
        session_store=session_store,
        time=clock,
    )
    if not result.success or result.user is None:
        raise _unauthorized()
    return result.user
