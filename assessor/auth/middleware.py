"""Authentication dependencies for FastAPI routes."""

from __future__ import annotations

import datetime
import typing as t

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from assessor.core import di
from assessor.model import User, UserID, UserRole

from . import local as local_auth
from .jwt import JWTManager, TokenData

# Security scheme for JWT bearer tokens
bearer_scheme = HTTPBearer(auto_error=False)


class AuthContext(t.NamedTuple):
    """Current authentication context."""

    user: User
    role: UserRole
    token_data: TokenData

    @property
    def is_reviewer(self) -> bool:
        return self.role is UserRole.Reviewer


@di.inject
def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AuthContext:
    """Dependency to get the current authenticated user.

    Raises:
        HTTPException 401: no token, an invalid or expired token, or an unknown user
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = decode_token(credentials.credentials)
    if token_data is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    with session.begin():
        user = local_auth.get_user(token_data.user_id, session=session)
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="User not found",
                headers={"WWW-Authenticate": "Bearer"},
            )

    # the stored role is authoritative over the one in the token
    return AuthContext(user=user, role=user.role, token_data=token_data)


def require_role(*allowed_roles: UserRole) -> t.Callable[..., AuthContext]:
    """Dependency factory to require specific roles.

    Usage:
        @router.post("/api/assessments")
        def create_route(auth: AuthContext = Depends(require_role(UserRole.Reviewer))):
            ...
    """

    def check_role(auth: AuthContext = Depends(get_current_user)) -> AuthContext:
        if auth.role not in allowed_roles:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role '{auth.role.value}' not authorized for this resource",
            )
        return auth

    return check_role


# Convenience dependencies
require_reviewer = require_role(UserRole.Reviewer)
require_participant = require_role(UserRole.Participant)


@di.inject
def create_access_token(
    user_id: UserID,
    role: UserRole,
    expires_delta: datetime.timedelta | None = None,
    jwt_manager: JWTManager = di.Provide["auth.jwt_manager"],
) -> tuple[str, datetime.datetime]:
    return jwt_manager.create_access_token(user_id, role, expires_delta)


@di.inject
def decode_token(token: str, jwt_manager: JWTManager = di.Provide["auth.jwt_manager"]) -> TokenData | None:
    return jwt_manager.decode_token(token)
