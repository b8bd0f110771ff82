"""Session store adapters.

Both implement SessionStorePort for the auth component. Sessions are keyed by
the hash of the issued token; the raw token is never stored.
"""

from datetime import datetime

from src.adapters.sqlite.repos import SQLiteRepoBase
from src.domain.entities import Session


class InMemorySessionStore:
    """In-memory session storage - suitable for single-process deployments."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def get(self, token_hash: str) -> Session | None:
        """Get session by token hash."""
        return self._sessions.get(token_hash)

    def save(self, token_hash: str, session: Session) -> None:
        """Save session with token hash as key."""
        self._sessions[token_hash] = session

    def delete(self, token_hash: str) -> None:
        """Delete session by token hash."""
        self._sessions.pop(token_hash, None)

    def delete_by_user(self, user_id: int) -> int:
        """Delete all sessions for a user. Returns count deleted."""
        to_remove = [k for k, v in self._sessions.items() if v.user_id == user_id]
        for token_hash in to_remove:
            del self._sessions[token_hash]
        return len(to_remove)


class SQLiteSessionStore(SQLiteRepoBase):
    """Sessions table; survives restarts alongside SQLite storage."""

    def get(self, token_hash: str) -> Session | None:
        conn = self._get_conn()
        try:
            row = conn.execute(
                "SELECT * FROM sessions WHERE token_hash = ?", (token_hash,)
            ).fetchone()
            if not row:
                return None
            return Session(
                id=row["id"],
                user_id=row["user_id"],
                token_hash=row["token_hash"],
                expires_at=datetime.fromisoformat(row["expires_at"]),
                created_at=datetime.fromisoformat(row["created_at"]),
            )
        finally:
            conn.close()

    def save(self, token_hash: str, session: Session) -> None:
        conn = self._get_conn()
        try:
            conn.execute(
                """
                INSERT INTO sessions (id, token_hash, user_id, expires_at, created_at)
                VALUES (?, ?, ?, ?, ?)
                ON CONFLICT(token_hash) DO UPDATE SET
                    user_id=excluded.user_id,
                    expires_at=excluded.expires_at
                """,
                (
                    session.id,
                    token_hash,
                    session.user_id,
                    session.expires_at.isoformat(),
                    session.created_at.isoformat(),
                ),
            )
            conn.commit()
        finally:
            conn.close()

    def delete(self, token_hash: str) -> None:
        conn = self._get_conn()
        try:
            conn.execute("DELETE FROM sessions WHERE token_hash = ?", (token_hash,))
            conn.commit()
        finally:
            conn.close()

    def delete_by_user(self, user_id: int) -> int:
        conn = self._get_conn()
        try:
            cursor = conn.execute("DELETE FROM sessions WHERE user_id = ?", (user_id,))
            conn.commit()
            return cursor.rowcount
        finally:
            conn.close()
