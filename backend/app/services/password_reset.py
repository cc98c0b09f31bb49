"""Password reset request and completion."""
from datetime import datetime, timezone
import hmac
import logging

from sqlalchemy.orm import Session

from app.config import Settings
from app.models.user import User
from app.services.mailer import EmailDeliveryError, Mailer, generate_reset_email_html
from app.services.errors import ExternalServiceError, ValidationFailed
from app.services.security import (
    InvalidToken,
    TokenType,
    create_reset_token,
    decode_token,
    hash_password,
    hash_token,
)

logger = logging.getLogger(__name__)

RESET_REQUESTED_MESSAGE = "If an account exists for that email, a reset link has been sent"
INVALID_RESET_TOKEN = "Invalid or expired reset token"


def request_password_reset(
    db: Session,
    email: str,
    mailer: Mailer,
    settings: Settings,
) -> str:
    """Issue a reset token for the account and email it out.

    The stored token is rolled back if the email cannot be sent, so a later
    request always starts a fresh flow.
    """
    user = db.query(User).filter(User.email == email.lower()).first()
    if not user:
        logger.info("Password reset requested for unknown email")
        return RESET_REQUESTED_MESSAGE

    token, expires_at = create_reset_token(user.id)
    user.reset_token_hash = hash_token(token)
    user.reset_token_expires_at = expires_at.isoformat()
    db.commit()

    reset_url = f"{settings.frontend_url.rstrip('/')}/reset-password/{token}"
    html = generate_reset_email_html(user.name, reset_url, settings.reset_token_expire_minutes)
    try:
        mailer.send(user.email, "FinTrack password reset", html)
    except EmailDeliveryError as exc:
        user.clear_reset_token()
        db.commit()
        logger.warning(f"Reset email for user {user.id} failed; pending token cleared")
        raise ExternalServiceError(f"Could not send reset email: {exc}") from exc

    logger.info(f"Password reset issued for user {user.id}")
    return RESET_REQUESTED_MESSAGE


def _reset_token_matches(user: User, token: str) -> bool:
    if not user.reset_token_hash or not user.reset_token_expires_at:
        return False
    if not hmac.compare_digest(user.reset_token_hash, hash_token(token)):
        return False
    try:
        expires_at = datetime.fromisoformat(user.reset_token_expires_at)
    except ValueError:
        return False
    return expires_at > datetime.now(timezone.utc)


def complete_password_reset(db: Session, token: str, new_password: str) -> None:
    """Consume a reset token and set the new password."""
    try:
        payload = decode_token(token, TokenType.RESET)
    except InvalidToken:
        raise ValidationFailed(INVALID_RESET_TOKEN)

    user = db.query(User).filter(User.id == payload["sub"]).first()
    if not user or not _reset_token_matches(user, token):
        raise ValidationFailed(INVALID_RESET_TOKEN)

    user.password_hash = hash_password(new_password)
    user.clear_reset_token()
    user.token_version = (user.token_version or 0) + 1
    db.commit()
    logger.info(f"Password reset completed for user {user.id}")
