"""Assessment authoring and retrieval routes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from assessor.auth import AuthContext, get_current_user, require_reviewer
from assessor.core import di
from assessor.model import AssessmentID
from assessor.storage import assessment as assessment_storage
from assessor.storage import user as user_storage

from ..view.assessment import AssessmentCreateRequest, AssessmentListResponse, AssessmentResponse, \
    AssessmentSummaryResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assessments", tags=["assessments"])


@router.post("", operation_id="create_assessment", status_code=status.HTTP_201_CREATED)
@di.inject
def create_assessment(
    request: AssessmentCreateRequest,
    auth: AuthContext = Depends(require_reviewer),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AssessmentResponse:
    """Publish a new assessment authored by the caller."""
    with session.begin():
        assessment = assessment_storage.create(
            {
                "title": request.title,
                "author_id": auth.user.user_id,
                "description": request.description,
                "time_limit_minutes": request.time_limit_minutes,
                "questions": [q.to_model() for q in request.questions],
            },
            session=session,
        )

    logger.info(
        "created assessment",
        extra={
            "assessment_id": assessment.assessment_id,
            "author_id": auth.user.user_id,
            "question_count": len(assessment.questions),
        },
    )
    return AssessmentResponse.from_model(assessment, auth.user, reveal_answers=True)


@router.get("", operation_id="list_assessments")
@di.inject
def list_assessments(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AssessmentListResponse:
    """List all published assessments, newest first."""
    with session.begin():
        assessments = assessment_storage.find(session=session)
        author_ids = {a.author_id for a in assessments}
        authors = {u.user_id: u for u in user_storage.find(user_ids=author_ids, session=session)}

    return AssessmentListResponse(
        assessments=[AssessmentSummaryResponse.from_model(a, authors.get(a.author_id)) for a in assessments]
    )


@router.get("/{assessment_id}", operation_id="get_assessment")
@di.inject
def get_assessment(
    assessment_id: AssessmentID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> AssessmentResponse:
    """Get one assessment. Answer keys are only shown to reviewers."""
    with session.begin():
        assessment = assessment_storage.get(assessment_id, session=session)
        if assessment is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Assessment not found",
            )
        author = user_storage.get(user_id=assessment.author_id, session=session)

    return AssessmentResponse.from_model(assessment, author, reveal_answers=auth.is_reviewer)
