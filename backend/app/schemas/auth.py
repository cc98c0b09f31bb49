"""Authentication schemas."""
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.budget import BudgetEntry


class SignupRequest(BaseModel):
    """Signup request."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=6)

    class Config:
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    """Login request."""

    email: EmailStr
    password: str = Field(..., min_length=1)

    class Config:
        extra = "forbid"


class ProfileUpdate(BaseModel):
    """Profile update request."""

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr

    class Config:
        extra = "forbid"

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class GoogleAuthRequest(BaseModel):
    """Google sign-in request carrying a Google OAuth access token."""

    external_token: str = Field(..., alias="externalToken", min_length=1)

    class Config:
        extra = "forbid"
        populate_by_name = True


class ForgotPasswordRequest(BaseModel):
    """Password reset request."""

    email: EmailStr

    class Config:
        extra = "forbid"


class ResetPasswordRequest(BaseModel):
    """Password reset completion."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., alias="newPassword", min_length=6)

    class Config:
        extra = "forbid"
        populate_by_name = True


class UserResponse(BaseModel):
    """Public user projection; never includes the password hash."""

    id: str
    name: str
    email: str
    budgets: list[BudgetEntry] = []
    is_verified: bool = False

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    """Session token plus the signed-in user."""

    message: str
    token: str
    user: UserResponse


class CurrentUserResponse(BaseModel):
    user: UserResponse


class ProfileResponse(BaseModel):
    message: str
    user: UserResponse


class MessageResponse(BaseModel):
    """Generic message response."""

    message: str
