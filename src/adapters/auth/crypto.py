"""
Password hashing (passlib, argon2) and signed session tokens (python-jose, HS256).
"""

import hashlib
import secrets
from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

ALGORITHM = "HS256"
DEV_SECRET_KEY = "dev-secret-unsafe"

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


class JWTAuthAdapter:
    """Auth adapter that uses JWT tokens and passlib (argon2) for password hashing."""

    def __init__(self, secret_key: str | None = None) -> None:
        self._secret_key = secret_key or DEV_SECRET_KEY

    def hash_password(self, password: str) -> str:
        result: str = pwd_context.hash(password)
        return result

    def verify_password(self, plain: str, hashed: str) -> bool:
        result: bool = pwd_context.verify(plain, hashed)
        return result

    def hash_token(self, token: str) -> str:
        """SHA-256 of a token; the form sessions are stored under."""
        return hashlib.sha256(token.encode()).hexdigest()

    def create_token(
        self, user_id: Any, ttl_minutes: int, now_utc: datetime | None = None
    ) -> str:
        """
        Signed token for user_id, valid for ttl_minutes.

        Args:
            user_id: Becomes the ``sub`` claim (as a string).
            ttl_minutes: Lifetime; the ``exp`` claim is now + ttl.
            now_utc: Issue time (for testing/determinism). Defaults to datetime.now(UTC).
        """
        issued = now_utc if now_utc is not None else datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "exp": issued + timedelta(minutes=ttl_minutes),
            # jti keeps two tokens issued in the same second distinct
            "jti": secrets.token_hex(8),
        }
        token: str = jwt.encode(claims, self._secret_key, algorithm=ALGORITHM)
        return token

    def decode_token(self, token: str) -> dict[str, Any] | None:
        """Claims of a valid token; None if the signature, format or expiry is bad."""
        try:
            claims: dict[str, Any] = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except JWTError:
            return None
        return claims

    def validate_token(self, token: str) -> Any | None:
        claims = self.decode_token(token)
        return claims.get("sub") if claims else None
