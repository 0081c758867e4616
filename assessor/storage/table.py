import datetime
import typing as t

from sqlalchemy import ForeignKey, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass
from sqlalchemy.types import DateTime

from assessor.model import AssessmentID, SubmissionID, UserID

from .type import JSONDocument, ShortUUIDKeyType

JSONList = list[dict[str, t.Any]]


class base(MappedAsDataclass, DeclarativeBase):
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        AssessmentID: ShortUUIDKeyType(AssessmentID),
        SubmissionID: ShortUUIDKeyType(SubmissionID),
        datetime.datetime: DateTime(timezone=True),
    }


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    username: Mapped[str] = mapped_column(unique=True)
    email: Mapped[str] = mapped_column(unique=True)
    password_hash: Mapped[str]
    role: Mapped[str]
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class assessments(base):
    __tablename__ = "assessments"

    assessment_id: Mapped[AssessmentID] = mapped_column(primary_key=True)
    title: Mapped[str]
    author_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), index=True)
    # ordered question documents
    questions: Mapped[JSONList] = mapped_column(JSONDocument)
    description: Mapped[str | None] = mapped_column(default=None)
    time_limit_minutes: Mapped[int | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())


class submissions(base):
    __tablename__ = "submissions"

    submission_id: Mapped[SubmissionID] = mapped_column(primary_key=True)
    participant_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id"), index=True)
    assessment_id: Mapped[AssessmentID] = mapped_column(ForeignKey("assessments.assessment_id"), index=True)
    status: Mapped[str]
    start_time: Mapped[datetime.datetime]
    answers: Mapped[JSONList] = mapped_column(JSONDocument, default_factory=list)
    results: Mapped[JSONList] = mapped_column(JSONDocument, default_factory=list)
    categories: Mapped[JSONList] = mapped_column(JSONDocument, default_factory=list)
    total_score: Mapped[float] = mapped_column(default=0)
    max_score: Mapped[float] = mapped_column(default=0)
    percentage: Mapped[float] = mapped_column(default=0)
    feedback: Mapped[str | None] = mapped_column(default=None)
    end_time: Mapped[datetime.datetime | None] = mapped_column(default=None)
    time_expired: Mapped[bool] = mapped_column(default=False)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


metadata = base.metadata
