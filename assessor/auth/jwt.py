"""JWT token management for session authentication."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant
import jwt
import pydantic as p

from assessor.model import UserID, UserRole


class TokenPayload(t.TypedDict):
    """JWT token payload structure."""

    sub: str  # user_id
    role: str  # participant or reviewer
    exp: int  # expiration timestamp
    iat: int  # issued at timestamp


class TokenData(t.NamedTuple):
    """Decoded token data."""

    user_id: UserID
    role: UserRole
    expires_at: datetime.datetime
    issued_at: datetime.datetime


class JWTManager(object):
    """Manages JWT token creation and validation."""

    _secret_key: p.Secret[str]
    _algorithm: str
    _access_token_expire_minutes: int

    def __init__(
        self,
        secret_key: p.Secret[str] | None,
        algorithm: str = "HS256",
        access_token_expire_minutes: t.Annotated[int, ant.Gt(0)] = 60,
    ) -> None:
        if secret_key is None or not secret_key.get_secret_value():
            raise ValueError("no JWT signing key configured (secrets.auth.jwt)")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self._access_token_expire_minutes = access_token_expire_minutes

    @property
    def secret_key(self) -> str:
        return self._secret_key.get_secret_value()

    @property
    def algorithm(self) -> str:
        return self._algorithm

    @property
    def access_token_expire_minutes(self) -> int:
        return self._access_token_expire_minutes

    def create_access_token(
        self,
        user_id: UserID,
        role: UserRole,
        expires_delta: datetime.timedelta | None = None,
        now: datetime.datetime | None = None,
    ) -> tuple[str, datetime.datetime]:
        """Create a new access token.

        Args:
            user_id: The user's ID
            role: The user's role
            expires_delta: Custom expiration time (default: access_token_expire_minutes)

        Returns:
            Encoded JWT token string and its expiry time
        """
        now = now or datetime.datetime.now(datetime.timezone.utc)
        if expires_delta is None:
            expires_delta = datetime.timedelta(minutes=self._access_token_expire_minutes)

        expire = now + expires_delta

        payload: TokenPayload = {
            "sub": str(user_id),
            "role": role.value,
            "exp": int(expire.timestamp()),
            "iat": int(now.timestamp()),
        }

        return jwt.encode(dict(payload), self.secret_key, algorithm=self._algorithm), expire

    def decode_token(self, token: str) -> TokenData | None:
        """Decode and validate a token.

        Returns:
            TokenData if valid, None if invalid or expired
        """
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )

            return TokenData(
                user_id=UserID(payload["sub"]),
                role=UserRole(payload["role"]),
                expires_at=datetime.datetime.fromtimestamp(payload["exp"], tz=datetime.timezone.utc),
                issued_at=datetime.datetime.fromtimestamp(payload["iat"], tz=datetime.timezone.utc),
            )
        except jwt.ExpiredSignatureError:
            return None
        except jwt.InvalidTokenError:
            return None
        except (KeyError, ValueError):
            # signed by us, but not a token this service issued
            return None
