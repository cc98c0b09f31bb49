"""Shared API dependencies."""
from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.services.errors import AuthenticationFailed, NotAuthorized, NotFound
from app.services.security import InvalidToken, TokenType, decode_token

__all__ = ["get_db", "get_current_token_claims", "get_current_user", "ensure_owner"]


def get_current_token_claims(request: Request) -> dict:
    """Verify the bearer token on the request and return its claims."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise AuthenticationFailed("No token, authorization denied")

    token = auth_header.split(" ", 1)[1].strip()
    if not token:
        raise AuthenticationFailed("No token, authorization denied")

    try:
        return decode_token(token, TokenType.SESSION)
    except InvalidToken:
        raise AuthenticationFailed("Invalid token")


def get_current_user(
    claims: dict = Depends(get_current_token_claims),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the authenticated user, rejecting tokens revoked by a password reset."""
    user = db.query(User).filter(User.id == claims["sub"]).first()
    if not user:
        raise NotFound("User not found")

    if claims.get("ver", 0) != (user.token_version or 0):
        raise AuthenticationFailed("Session has been revoked")

    return user


def ensure_owner(resource, user: User) -> None:
    """Authentication alone does not grant access to another user's records."""
    if resource.user_id != user.id:
        raise NotAuthorized("Not authorized")
