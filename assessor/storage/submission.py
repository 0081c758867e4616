from __future__ import annotations

import datetime
import typing as t

import sqlalchemy as sqla

from assessor.core import di
from assessor.model import Answer, AssessmentID, CategoryScore, EvaluationResult, Submission, SubmissionID, \
    SubmissionStatus, UserID

from . import Session
from .table import submissions

_document_fields = ("answers", "results", "categories")


def get(key: SubmissionID, session: Session = di.Provide["storage.persistent.session"]) -> Submission | None:
    stmt = sqla.select(submissions.__table__).where(submissions.submission_id == key)
    row = session.execute(stmt).mappings().one_or_none()
    return Submission(**row) if row else None


def find(
    *,
    participant_id: UserID | None = None,
    assessment_id: AssessmentID | None = None,
    status: SubmissionStatus | None = None,
    limit: int | None = None,
    session: Session = di.Provide["storage.persistent.session"],
) -> tuple[Submission, ...]:
    """Submissions, most recently started first."""
    stmt = sqla.select(submissions.__table__).order_by(submissions.start_time.desc())
    if participant_id is not None:
        stmt = stmt.where(submissions.participant_id == participant_id)
    if assessment_id is not None:
        stmt = stmt.where(submissions.assessment_id == assessment_id)
    if status is not None:
        stmt = stmt.where(submissions.status == status.value)
    if limit is not None:
        stmt = stmt.limit(limit)
    rows = session.execute(stmt).mappings().all()
    return tuple(Submission(**row) for row in rows)


def create(params: SubmissionCreateParams, session: Session = di.Provide["storage.persistent.session"]) -> Submission:
    submission = submissions(
        submission_id=SubmissionID(),
        participant_id=params["participant_id"],
        assessment_id=params["assessment_id"],
        status=SubmissionStatus.InProgress.value,
        start_time=params["start_time"],
        answers=[a.model_dump(mode="json") for a in params.get("answers", [])],
    )
    session.add(submission)
    session.flush()
    return get(submission.submission_id, session=session)  # type: ignore


def update(
    key: SubmissionID,
    params: SubmissionUpdateParams,
    session: Session = di.Provide["storage.persistent.session"],
) -> Submission | None:
    """Field-level update of one submission row."""
    stmt = sqla.select(submissions).where(submissions.submission_id == key)
    submission = session.execute(stmt).scalar_one_or_none()
    if submission is None:
        return None
    for field, value in params.items():
        actual_value: t.Any = value
        if field in _document_fields:
            actual_value = [v.model_dump(mode="json") for v in t.cast(list[t.Any], value)]
        elif field == "status":
            actual_value = t.cast(SubmissionStatus, value).value
        setattr(submission, field, actual_value)
    session.flush()
    return get(key, session=session)


class SubmissionCreateParams(t.TypedDict, total=False):
    participant_id: t.Required[UserID]
    assessment_id: t.Required[AssessmentID]
    start_time: t.Required[datetime.datetime]
    answers: list[Answer]


class SubmissionUpdateParams(t.TypedDict, total=False):
    status: SubmissionStatus
    answers: list[Answer]
    results: list[EvaluationResult]
    categories: list[CategoryScore]
    total_score: float
    max_score: float
    percentage: float
    feedback: str | None
    end_time: datetime.datetime | None
    time_expired: bool


def save_answers(
    submission: Submission, session: Session = di.Provide["storage.persistent.session"]
) -> Submission | None:
    """Persist the answers of an in-progress submission.

    Raises:
        ValueError: the stored submission is no longer in progress
    """
    _check_status(submission.submission_id, SubmissionStatus.InProgress, session=session)
    return update(submission.submission_id, {"answers": submission.answers}, session=session)


def transition_to_evaluating(
    submission: Submission, session: Session = di.Provide["storage.persistent.session"]
) -> Submission | None:
    """InProgress -> Evaluating, storing the frozen answers and end time.

    Raises:
        ValueError: the stored submission is not in progress
    """
    _check_status(submission.submission_id, SubmissionStatus.InProgress, session=session)
    return update(
        submission.submission_id,
        {
            "status": SubmissionStatus.Evaluating,
            "answers": submission.answers,
            "end_time": submission.end_time,
            "time_expired": submission.time_expired,
        },
        session=session,
    )


def transition_to_completed(
    submission: Submission, session: Session = di.Provide["storage.persistent.session"]
) -> Submission | None:
    """Evaluating -> Completed, storing results, totals and feedback.

    Raises:
        ValueError: the stored submission is not being evaluated
    """
    _check_status(submission.submission_id, SubmissionStatus.Evaluating, session=session)
    return update(
        submission.submission_id,
        {"status": SubmissionStatus.Completed, **_scores(submission)},
        session=session,
    )


def revert_to_in_progress(
    submission: Submission, session: Session = di.Provide["storage.persistent.session"]
) -> Submission | None:
    """Evaluating -> InProgress after scoring was interrupted; the frozen answers are kept.

    Raises:
        ValueError: the stored submission is not being evaluated
    """
    _check_status(submission.submission_id, SubmissionStatus.Evaluating, session=session)
    return update(
        submission.submission_id,
        {"status": SubmissionStatus.InProgress, "end_time": None, "time_expired": False},
        session=session,
    )


def save_grades(
    submission: Submission, session: Session = di.Provide["storage.persistent.session"]
) -> Submission | None:
    """Store a manual regrade of a completed submission.

    Raises:
        ValueError: the stored submission is not completed
    """
    _check_status(submission.submission_id, SubmissionStatus.Completed, session=session)
    return update(submission.submission_id, _scores(submission), session=session)


def _scores(submission: Submission) -> SubmissionUpdateParams:
    return {
        "results": submission.results,
        "categories": submission.categories,
        "total_score": submission.total_score,
        "max_score": submission.max_score,
        "percentage": submission.percentage,
        "feedback": submission.feedback,
    }


def _check_status(key: SubmissionID, expected: SubmissionStatus, session: Session) -> None:
    stmt = sqla.select(submissions.status).where(submissions.submission_id == key)
    current = session.execute(stmt).scalar_one_or_none()
    if current is None:
        raise KeyError(f"Submission {key} not found")
    if current != expected.value:
        raise ValueError(f"Submission {key} is {current}, expected {expected.value}")
