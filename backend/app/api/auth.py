"""Authentication API endpoints."""
import logging

from fastapi import APIRouter, Depends, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.config import get_settings
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    CurrentUserResponse,
    ForgotPasswordRequest,
    GoogleAuthRequest,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    ProfileUpdate,
    ResetPasswordRequest,
    SignupRequest,
    UserResponse,
)
from app.services.errors import AuthenticationFailed, Conflict
from app.services.google_identity import (
    GoogleIdentityClient,
    IdentityProviderError,
    get_identity_client,
    link_or_create_user,
)
from app.services.mailer import Mailer, get_mailer
from app.services.password_reset import complete_password_reset, request_password_reset
from app.services.security import create_session_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

INVALID_CREDENTIALS = "Invalid credentials"


def _auth_response(user: User, message: str) -> AuthResponse:
    return AuthResponse(
        message=message,
        token=create_session_token(user),
        user=UserResponse.model_validate(user),
    )


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def signup(user_data: SignupRequest, db: Session = Depends(get_db)):
    """Register a new user and start a session."""
    email = user_data.email.lower()
    if db.query(User).filter(User.email == email).first():
        raise Conflict("User already exists with this email")

    user = User(
        name=user_data.name,
        email=email,
        password_hash=hash_password(user_data.password),
        is_verified=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email
        db.rollback()
        raise Conflict("User already exists with this email")
    db.refresh(user)

    logger.info(f"Registered user {user.id}")
    return _auth_response(user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
def login(user_data: LoginRequest, db: Session = Depends(get_db)):
    """Login and get a session token."""
    user = db.query(User).filter(User.email == user_data.email.lower()).first()

    if not user or not verify_password(user_data.password, user.password_hash):
        logger.info("Failed login attempt")
        raise AuthenticationFailed(INVALID_CREDENTIALS)

    return _auth_response(user, "Login successful")


@router.get("/me", response_model=CurrentUserResponse)
def get_me(current_user: User = Depends(get_current_user)):
    """Get the signed-in user."""
    return CurrentUserResponse(user=UserResponse.model_validate(current_user))


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    profile: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Update name and email of the signed-in user."""
    email = profile.email.lower()
    if email != current_user.email:
        taken = db.query(User).filter(User.email == email, User.id != current_user.id).first()
        if taken:
            raise Conflict("Email already in use")

    current_user.name = profile.name
    current_user.email = email
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Email already in use")
    db.refresh(current_user)

    return ProfileResponse(
        message="Profile updated successfully",
        user=UserResponse.model_validate(current_user),
    )


@router.post("/google", response_model=AuthResponse)
async def google_login(
    payload: GoogleAuthRequest,
    db: Session = Depends(get_db),
    identity_client: GoogleIdentityClient = Depends(get_identity_client),
):
    """Sign in with a Google access token, linking or creating the local account."""
    try:
        profile = await identity_client.fetch_profile(payload.external_token)
    except IdentityProviderError as exc:
        logger.warning(f"Google sign-in rejected: {exc}")
        raise AuthenticationFailed("Google authentication failed")

    try:
        user = await run_in_threadpool(link_or_create_user, db, profile)
    except IdentityProviderError as exc:
        logger.warning(f"Google sign-in rejected: {exc}")
        raise AuthenticationFailed("Google authentication failed")
    except IntegrityError:
        db.rollback()
        raise Conflict("Account is already linked to another Google profile")

    return _auth_response(user, "Login successful")


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
):
    """Email a single-use password reset link."""
    message = request_password_reset(db, payload.email, mailer, get_settings())
    return MessageResponse(message=message)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(payload: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Set a new password using a reset token."""
    complete_password_reset(db, payload.token, payload.new_password)
    return MessageResponse(message="Password has been reset successfully")
