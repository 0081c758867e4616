from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from assessor.core import di
from assessor.model import Assessment, AssessmentID, Question, UserID

from . import Session
from .table import assessments


def get(key: AssessmentID, session: Session = di.Provide["storage.persistent.session"]) -> Assessment | None:
    stmt = sqla.select(assessments.__table__).where(assessments.assessment_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Assessment(**row) if row else None


def find(
    *,
    author_id: UserID | None = None,
    assessment_ids: t.Collection[AssessmentID] | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Assessment, ...]:
    """Assessments, newest first."""
    stmt = sqla.select(assessments.__table__).order_by(assessments.create_time.desc())
    if author_id is not None:
        stmt = stmt.where(assessments.author_id == author_id)
    if assessment_ids is not None:
        stmt = stmt.where(assessments.assessment_id.in_(list(assessment_ids)))
    rows = session.execute(stmt).mappings().all()
    return tuple(Assessment(**row) for row in rows)


def create(params: AssessmentCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Assessment:
    """Insert a published assessment; questions cannot be changed afterwards."""
    # validates question invariants before anything is written
    questions = [Question.model_validate(q) for q in params["questions"]]
    if not questions:
        raise ValueError("an assessment needs at least one question")

    assessment = assessments(
        assessment_id=AssessmentID(),
        title=params["title"],
        author_id=params["author_id"],
        questions=[q.model_dump(mode="json") for q in questions],
        description=params.get("description"),
        time_limit_minutes=params.get("time_limit_minutes"),
    )
    session.add(assessment)
    session.flush()
    return get(assessment.assessment_id, session=session)  # type: ignore


class AssessmentCreateParams(t.TypedDict, total=False):
    title: t.Required[str]
    author_id: t.Required[UserID]
    questions: t.Required[t.Sequence[Question | dict[str, t.Any]]]
    description: str | None
    time_limit_minutes: int | None
