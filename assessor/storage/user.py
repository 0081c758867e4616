from __future__ import annotations

import typing as t

import bcrypt
import pydantic as p
import sqlalchemy as sqla

from assessor.core import di
from assessor.lib.sentinel import NotSet
from assessor.model import User, UserID, UserRole

from . import Session
from .table import users


def hash_password(password: p.Secret[str]) -> str:
    return bcrypt.hashpw(password.get_secret_value().encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def check_password(user: User, password: p.Secret[str]) -> bool:
    return bcrypt.checkpw(password.get_secret_value().encode("utf-8"), user.password_hash.encode("utf-8"))


def get(
    *,
    user_id: UserID | None = None,
    email: str | None = None,
    username: str | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> User | None:
    """Get a user by exactly one of ID, email or username."""
    given = [k for k in (user_id, email, username) if k is not None]
    if len(given) != 1:
        raise ValueError("exactly one of user_id, email or username must be provided")

    stmt = sqla.select(users.__table__)
    if user_id is not None:
        stmt = stmt.where(users.user_id == user_id)
    elif email is not None:
        stmt = stmt.where(sqla.func.lower(users.email) == email.lower())
    else:
        stmt = stmt.where(users.username == username)

    row = session.execute(stmt).mappings().one_or_none()
    return User(**row) if row else None


def find(
    *,
    user_ids: t.Collection[UserID] | None = None,
    role: UserRole | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[User, ...]:
    stmt = sqla.select(users.__table__).order_by(users.create_time)
    if user_ids is not None:
        stmt = stmt.where(users.user_id.in_(list(user_ids)))
    if role is not None:
        stmt = stmt.where(users.role == role.value)
    rows = session.execute(stmt).mappings().all()
    return tuple(User(**row) for row in rows)


def create(
    *,
    username: str,
    email: str,
    password: p.Secret[str],
    role: UserRole = UserRole.Participant,
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """Create a new user; the password is stored as a bcrypt hash."""
    user = users(
        user_id=UserID(),
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
    )
    session.add(user)
    session.flush()
    return get(user_id=user.user_id, session=session)  # type: ignore[return-value]


def update(
    user_id: UserID,
    *,
    username: str | NotSet = NotSet(),
    email: str | NotSet = NotSet(),
    password: p.Secret[str] | NotSet = NotSet(),
    role: UserRole | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> User:
    """
    Raises:
        KeyError: If user_id does not correspond to a user
    """
    values: dict[str, t.Any] = {}
    if not isinstance(username, NotSet):
        values["username"] = username
    if not isinstance(email, NotSet):
        values["email"] = email
    if not isinstance(password, NotSet):
        values["password_hash"] = hash_password(password)
    if not isinstance(role, NotSet):
        values["role"] = role.value

    if values:
        stmt = sqla.update(users).where(users.user_id == user_id).values(**values)
    else:
        # no-op update to verify the user exists
        stmt = sqla.update(users).where(users.user_id == user_id).values(user_id=user_id)

    result = session.execute(stmt)
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"User {user_id} not found")

    session.flush()
    return get(user_id=user_id, session=session)  # type: ignore[return-value]
