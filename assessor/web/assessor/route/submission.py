"""Routes for taking assessments, scoring submissions and manual grading."""

from __future__ import annotations

import datetime
import logging

import jinja2
from fastapi import APIRouter, Depends, HTTPException, status
from langchain_core.language_models import BaseChatModel
from sqlalchemy.orm import Session

from assessor.auth import AuthContext, get_current_user, require_participant, require_reviewer
from assessor.core import di, TimestampProvider
from assessor.llm.evaluation import apply_overrides, GradeOverride, InvalidTransition, ScoreOutOfRange, \
    ScoringPipeline, SubmissionContext, UnknownQuestion
from assessor.model import Assessment, AssessmentID, Submission, SubmissionID, SubmissionStatus
from assessor.storage import assessment as assessment_storage
from assessor.storage import submission as submission_storage

from ..view.submission import AnswerRequest, GradeRequest, StartSubmissionRequest, SubmissionListResponse, \
    SubmissionResponse, SubmissionSummaryResponse, SubmitRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submissions", tags=["submissions"])

ALREADY_SUBMITTED = "Submission has already been submitted"
TIME_EXPIRED = "Time limit expired; the submission has been finalised"


def is_expired(assessment: Assessment, submission: Submission, now: datetime.datetime) -> bool:
    if assessment.time_limit is None:
        return False
    return now >= submission.start_time + assessment.time_limit


def _load(submission_id: SubmissionID, session: Session) -> tuple[Submission, Assessment]:
    submission = submission_storage.get(submission_id, session=session)
    if submission is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Submission not found",
        )
    assessment = assessment_storage.get(submission.assessment_id, session=session)
    if assessment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assessment not found",
        )
    return submission, assessment


def _check_owner(auth: AuthContext, submission: Submission) -> None:
    if submission.participant_id != auth.user.user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this submission",
        )


def _freeze(context: SubmissionContext, now: datetime.datetime, time_expired: bool, session: Session) -> None:
    try:
        context.freeze(now, time_expired=time_expired)
        submission_storage.transition_to_evaluating(context.submission, session=session)
    except (InvalidTransition, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=ALREADY_SUBMITTED,
        ) from e


async def _score(
    context: SubmissionContext, pipeline: ScoringPipeline, now: datetime.datetime, session: Session
) -> Submission:
    # the evaluation service is called outside of any transaction
    try:
        submission = await pipeline.score(context, now)
    except BaseException:
        # interrupted scoring puts the submission back in progress
        logger.warning("scoring interrupted", extra={"submission_id": context.submission.submission_id})
        with session.begin():
            submission_storage.revert_to_in_progress(context.submission, session=session)
        raise

    with session.begin():
        stored = submission_storage.transition_to_completed(submission, session=session)

    logger.info(
        "completed submission",
        extra={
            "submission_id": submission.submission_id,
            "percentage": submission.percentage,
            "time_expired": submission.time_expired,
        },
    )
    return stored or submission


async def finalize(
    submission_id: SubmissionID,
    *,
    time_expired: bool,
    now: datetime.datetime,
    pipeline: ScoringPipeline,
    session: Session,
) -> tuple[Submission, Assessment]:
    """Freeze the stored answers of an in-progress submission and score them."""
    with session.begin():
        submission, assessment = _load(submission_id, session)
        context = SubmissionContext(assessment, submission)
        _freeze(context, now, time_expired, session)

    return await _score(context, pipeline, now, session), assessment


@router.post("", operation_id="submit_assessment", status_code=status.HTTP_201_CREATED)
@di.inject
async def submit_assessment(
    request: SubmitRequest,
    auth: AuthContext = Depends(require_participant),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    model: BaseChatModel = Depends(di.Provide["llm.evaluation_model"]),
    env: jinja2.Environment = Depends(di.Provide["template.llm"]),
    timeout: float = Depends(di.Provide["config.llm.models.evaluation.timeout_seconds"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> SubmissionResponse:
    """Submit a complete set of answers in one request and score them."""
    now = utcnow()
    start_time = min(request.start_time or now, now)

    with session.begin():
        assessment = assessment_storage.get(request.assessment_id, session=session)
        if assessment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Assessment not found",
            )
        if any(assessment.get_question(a.question_id) is None for a in request.answers):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Question not found",
            )

        submission = submission_storage.create(
            {
                "participant_id": auth.user.user_id,
                "assessment_id": assessment.assessment_id,
                "start_time": start_time,
            },
            session=session,
        )
        context = SubmissionContext(assessment, submission)
        for answer in request.answers:
            question = assessment.get_question(answer.question_id)
            assert question is not None
            context.edit_answer(question, answer.content, now)

        time_expired = request.time_expired or is_expired(assessment, submission, now)
        _freeze(context, now, time_expired, session)

    pipeline = ScoringPipeline(model, env, timeout=timeout)
    submission = await _score(context, pipeline, now, session)
    return SubmissionResponse.from_model(submission, assessment)


@router.post("/start", operation_id="start_submission", status_code=status.HTTP_201_CREATED)
@di.inject
def start_submission(
    request: StartSubmissionRequest,
    auth: AuthContext = Depends(require_participant),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> SubmissionResponse:
    """Open a new attempt; its time limit, if any, runs from now."""
    with session.begin():
        assessment = assessment_storage.get(request.assessment_id, session=session)
        if assessment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Assessment not found",
            )
        submission = submission_storage.create(
            {
                "participant_id": auth.user.user_id,
                "assessment_id": assessment.assessment_id,
                "start_time": utcnow(),
            },
            session=session,
        )

    return SubmissionResponse.from_model(submission, assessment)


@router.put("/{submission_id}/answers", operation_id="save_answer")
@di.inject
async def save_answer(
    submission_id: SubmissionID,
    request: AnswerRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    model: BaseChatModel = Depends(di.Provide["llm.evaluation_model"]),
    env: jinja2.Environment = Depends(di.Provide["template.llm"]),
    timeout: float = Depends(di.Provide["config.llm.models.evaluation.timeout_seconds"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> SubmissionResponse:
    """Record or replace the answer to one question of an in-progress attempt.

    An edit arriving after the time limit finalises the attempt with the
    answers saved so far and is rejected.
    """
    now = utcnow()
    with session.begin():
        submission, assessment = _load(submission_id, session)
        _check_owner(auth, submission)
        if submission.status is not SubmissionStatus.InProgress:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=ALREADY_SUBMITTED,
            )

        expired = is_expired(assessment, submission, now)
        if not expired:
            question = assessment.get_question(request.question_id)
            if question is None:
                raise HTTPException(
                    status_code=status.HTTP_404_NOT_FOUND,
                    detail="Question not found",
                )
            context = SubmissionContext(assessment, submission)
            context.edit_answer(question, request.content, now)
            try:
                submission = submission_storage.save_answers(context.submission, session=session) or submission
            except ValueError as e:
                raise HTTPException(
                    status_code=status.HTTP_409_CONFLICT,
                    detail=ALREADY_SUBMITTED,
                ) from e

    if expired:
        pipeline = ScoringPipeline(model, env, timeout=timeout)
        await finalize(submission_id, time_expired=True, now=now, pipeline=pipeline, session=session)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=TIME_EXPIRED,
        )

    return SubmissionResponse.from_model(submission, assessment)


@router.post("/{submission_id}/submit", operation_id="finish_submission")
@di.inject
async def finish_submission(
    submission_id: SubmissionID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    model: BaseChatModel = Depends(di.Provide["llm.evaluation_model"]),
    env: jinja2.Environment = Depends(di.Provide["template.llm"]),
    timeout: float = Depends(di.Provide["config.llm.models.evaluation.timeout_seconds"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> SubmissionResponse:
    """Submit an in-progress attempt and score its saved answers."""
    now = utcnow()
    with session.begin():
        submission, assessment = _load(submission_id, session)
        _check_owner(auth, submission)
        time_expired = is_expired(assessment, submission, now)

    pipeline = ScoringPipeline(model, env, timeout=timeout)
    submission, assessment = await finalize(
        submission_id, time_expired=time_expired, now=now, pipeline=pipeline, session=session
    )
    return SubmissionResponse.from_model(submission, assessment)


@router.get("", operation_id="list_submissions")
@di.inject
def list_submissions(
    assessment_id: AssessmentID | None = None,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionListResponse:
    """List submissions, most recent first.

    Participants see their own; reviewers see everyone's.
    """
    with session.begin():
        submissions = submission_storage.find(
            participant_id=None if auth.is_reviewer else auth.user.user_id,
            assessment_id=assessment_id,
            session=session,
        )
        assessments = {
            a.assessment_id: a
            for a in assessment_storage.find(assessment_ids={s.assessment_id for s in submissions}, session=session)
        }

    return SubmissionListResponse(
        submissions=[SubmissionSummaryResponse.from_model(s, assessments.get(s.assessment_id)) for s in submissions]
    )


@router.get("/{submission_id}", operation_id="get_submission")
@di.inject
async def get_submission(
    submission_id: SubmissionID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
    model: BaseChatModel = Depends(di.Provide["llm.evaluation_model"]),
    env: jinja2.Environment = Depends(di.Provide["template.llm"]),
    timeout: float = Depends(di.Provide["config.llm.models.evaluation.timeout_seconds"]),
    utcnow: TimestampProvider = Depends(di.Provide["utcnow"]),
) -> SubmissionResponse:
    """Get one submission; an attempt past its time limit is finalised first."""
    now = utcnow()
    with session.begin():
        submission, assessment = _load(submission_id, session)
        if not auth.is_reviewer and submission.participant_id != auth.user.user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not authorized to view this submission",
            )

    if submission.status is SubmissionStatus.InProgress and is_expired(assessment, submission, now):
        pipeline = ScoringPipeline(model, env, timeout=timeout)
        submission, assessment = await finalize(
            submission_id, time_expired=True, now=now, pipeline=pipeline, session=session
        )

    return SubmissionResponse.from_model(submission, assessment)


@router.patch("/{submission_id}/grade", operation_id="grade_submission")
@di.inject
def grade_submission(
    submission_id: SubmissionID,
    request: GradeRequest,
    auth: AuthContext = Depends(require_reviewer),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> SubmissionResponse:
    """Override question scores of a completed submission and recompute its totals."""
    with session.begin():
        submission, assessment = _load(submission_id, session)
        if submission.status is not SubmissionStatus.Completed:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Only completed submissions can be graded",
            )

        overrides = [GradeOverride(g.question_id, g.score, g.feedback) for g in request.grades]
        try:
            graded = apply_overrides(assessment, submission, overrides, request.feedback)
        except UnknownQuestion as e:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Question not found",
            ) from e
        except ScoreOutOfRange as e:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail=str(e),
            ) from e

        try:
            stored = submission_storage.save_grades(graded, session=session)
        except ValueError as e:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Only completed submissions can be graded",
            ) from e

    logger.info(
        "graded submission",
        extra={
            "submission_id": submission_id,
            "reviewer_id": auth.user.user_id,
            "overrides": len(overrides),
            "total_score": graded.total_score,
        },
    )
    return SubmissionResponse.from_model(stored or graded, assessment)
