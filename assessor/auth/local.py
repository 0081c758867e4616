"""Local username/password authentication backed by the users table."""

from __future__ import annotations

import typing as t

import pydantic as p
from sqlalchemy.orm import Session

from assessor.core import di
from assessor.model import User, UserID, UserRole
from assessor.storage import user as user_storage

INVALID_CREDENTIALS = "Invalid email or password"


class AuthResult(t.NamedTuple):
    """Result of an authentication attempt."""

    success: bool
    user: User | None = None
    error: str | None = None


def authenticate(
    email: str, password: p.Secret[str], session: Session = di.Provide["storage.persistent.session"]
) -> AuthResult:
    user = user_storage.get(email=email, session=session)
    if user is None or not user_storage.check_password(user, password):
        return AuthResult(success=False, error=INVALID_CREDENTIALS)
    return AuthResult(success=True, user=user)


def register(
    *,
    username: str,
    email: str,
    password: p.Secret[str],
    role: UserRole = UserRole.Participant,
    session: Session = di.Provide["storage.persistent.session"],
) -> AuthResult:
    """Register a new user; usernames and emails are unique."""
    if user_storage.get(email=email, session=session) is not None:
        return AuthResult(success=False, error="Email already registered")
    if user_storage.get(username=username, session=session) is not None:
        return AuthResult(success=False, error="Username already taken")

    user = user_storage.create(username=username, email=email, password=password, role=role, session=session)
    return AuthResult(success=True, user=user)


def get_user(user_id: UserID, session: Session = di.Provide["storage.persistent.session"]) -> User | None:
    return user_storage.get(user_id=user_id, session=session)
