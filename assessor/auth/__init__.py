"""Authentication utilities."""

__all__ = [
    "AuthContext",
    "AuthResult",
    "JWTManager",
    "TokenData",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "require_participant",
    "require_reviewer",
    "require_role",
]

from .jwt import JWTManager, TokenData
from .local import AuthResult
from .middleware import (
    AuthContext,
    create_access_token,
    decode_token,
    get_current_user,
    require_participant,
    require_reviewer,
    require_role,
)
