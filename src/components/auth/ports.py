from datetime import datetime
from typing import Any, Protocol

from src.domain.entities import InsertUser, Session, User


class UserRepoPort(Protocol):
    def get(self, user_id: int) -> User | None: ...
    def get_by_username(self, username: str) -> User | None: ...
    def create(self, data: InsertUser) -> User: ...
    def update(self, user_id: int, changes: dict[str, Any]) -> User | None: ...


class AuthAdapterPort(Protocol):
    def verify_password(self, plain: str, hashed: str) -> bool: ...
    def hash_password(self, plain: str) -> str: ...
    def hash_token(self, token: str) -> str: ...
    def create_token(self, user_id: object, ttl_minutes: int) -> str: ...
    def validate_token(self, token: str) -> Any | None: ...


class TimePort(Protocol):
    """Port for time operations - enables deterministic testing."""

    def now_utc(self) -> datetime:
        """Get current UTC time."""
        ...


class SessionStorePort(Protocol):
    """Port for session storage - removes global state from component."""

    def get(self, token_hash: str) -> Session | None:
        """Get session by token hash."""
        ...

    def save(self, token_hash: str, session: Session) -> None:
        """Save session with token hash as key."""
        ...

    def delete(self, token_hash: str) -> None:
        """Delete session by token hash."""
        ...

    def delete_by_user(self, user_id: int) -> int:
        """Delete all sessions for a user. Returns count deleted."""
        ...
