"""View models for authentication endpoints."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p
from pydantic import EmailStr

from assessor.model import BaseModel, User, UserID, UserRole


class LoginRequest(BaseModel):
    """Request body for login."""

    email: EmailStr
    password: p.Secret[str]


class RegisterRequest(BaseModel):
    """Request body for registration."""

    username: t.Annotated[str, p.StringConstraints(strip_whitespace=True, min_length=3, max_length=64)]
    email: EmailStr
    password: p.Secret[str]

    @p.field_validator("password")
    @classmethod
    def check_password_length(cls, password: p.Secret[str]) -> p.Secret[str]:
        if len(password.get_secret_value()) < 6:
            raise ValueError("password must be at least 6 characters")
        return password


class TokenResponse(BaseModel):
    """Response containing access token."""

    access_token: str
    token_type: str = "bearer"
    expires_at: datetime.datetime


class UserResponse(BaseModel):
    """Response containing user information."""

    user_id: UserID
    username: str
    email: EmailStr
    role: UserRole

    @classmethod
    def from_model(cls, user: User) -> UserResponse:
        return cls(user_id=user.user_id, username=user.username, email=user.email, role=user.role)


class LoginResponse(BaseModel):
    """Response for successful login or registration."""

    user: UserResponse
    token: TokenResponse
