"""Password hashing and bearer token helpers."""
from datetime import datetime, timedelta, timezone
import enum
import hashlib
import secrets

import bcrypt
from jose import JWTError, jwt

from app.config import get_settings

# bcrypt ignores everything past 72 bytes; truncate explicitly so hash and verify agree
BCRYPT_MAX_BYTES = 72


class TokenType(str, enum.Enum):
    SESSION = "session"
    RESET = "reset"


class InvalidToken(Exception):
    """Token is malformed, tampered with, expired or of the wrong type."""


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password."""
    return bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def placeholder_password_hash() -> str:
    """Hash of a random secret nobody knows, for accounts created via Google."""
    return hash_password(secrets.token_urlsafe(32))


def hash_token(token: str) -> str:
    """Hash a token before persisting it."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def create_token(
    user_id: str,
    token_type: TokenType,
    expires_delta: timedelta,
    **claims,
) -> str:
    """Create a signed JWT for a user."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    to_encode = dict(claims)
    to_encode.update({
        "sub": user_id,
        "type": token_type.value,
        "iat": now,
        "exp": now + expires_delta,
    })
    if token_type is TokenType.RESET:
        # Two resets issued in the same second must still differ
        to_encode["jti"] = secrets.token_hex(8)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.algorithm)


def create_session_token(user) -> str:
    """Create a long-lived session token bound to the user's current token version."""
    settings = get_settings()
    return create_token(
        user.id,
        TokenType.SESSION,
        timedelta(days=settings.session_token_expire_days),
        ver=user.token_version or 0,
    )


def create_reset_token(user_id: str) -> tuple[str, datetime]:
    """Create a short-lived password reset token and return it with its expiry."""
    settings = get_settings()
    expires_delta = timedelta(minutes=settings.reset_token_expire_minutes)
    expires_at = datetime.now(timezone.utc) + expires_delta
    return create_token(user_id, TokenType.RESET, expires_delta), expires_at


def decode_token(token: str, expected_type: TokenType) -> dict:
    """Decode and verify a token, returning its claims."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise InvalidToken(str(exc)) from exc

    if payload.get("type") != expected_type.value:
        raise InvalidToken("Invalid token type")
    if not payload.get("sub"):
        raise InvalidToken("Token has no subject")
    return payload
