import enum

from pydantic import EmailStr

from .base import WithTimestamps
from .id import UserID


class UserRole(enum.Enum):
    Participant = "participant"
    Reviewer = "reviewer"


class User(WithTimestamps):
    user_id: UserID
    username: str
    email: EmailStr
    role: UserRole = UserRole.Participant
    password_hash: str
