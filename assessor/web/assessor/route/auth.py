"""Authentication routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from assessor.auth import AuthContext, create_access_token, get_current_user
from assessor.auth import local as local_auth
from assessor.core import di

from ..view.auth import LoginRequest, LoginResponse, RegisterRequest, TokenResponse, UserResponse

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/register", operation_id="register", status_code=status.HTTP_201_CREATED)
@di.inject
def register(
    request: RegisterRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> LoginResponse:
    """Register a new user and sign them in."""
    with session.begin():
        result = local_auth.register(
            username=request.username,
            email=request.email,
            password=request.password,
            session=session,
        )

        if not result.success or result.user is None:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=result.error or "Registration failed",
            )

    access_token, expires_at = create_access_token(user_id=result.user.user_id, role=result.user.role)

    return LoginResponse(
        user=UserResponse.from_model(result.user),
        token=TokenResponse(access_token=access_token, expires_at=expires_at),
    )


@router.post("/login", operation_id="login")
@di.inject
def login(
    request: LoginRequest,
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> LoginResponse:
    """Authenticate a user and return access token."""
    with session.begin():
        result = local_auth.authenticate(request.email, request.password, session=session)

        if not result.success or result.user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=result.error or "Invalid credentials",
                headers={"WWW-Authenticate": "Bearer"},
            )

    access_token, expires_at = create_access_token(user_id=result.user.user_id, role=result.user.role)

    return LoginResponse(
        user=UserResponse.from_model(result.user),
        token=TokenResponse(access_token=access_token, expires_at=expires_at),
    )


@router.get("/me", operation_id="get_current_user")
def get_me(
    auth: AuthContext = Depends(get_current_user),
) -> UserResponse:
    """Get the current authenticated user."""
    return UserResponse.from_model(auth.user)
