"""Participant analytics routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from assessor.auth import AuthContext, get_current_user
from assessor.core import di
from assessor.llm.evaluation.aggregator import percentage
from assessor.model import SubmissionStatus
from assessor.storage import assessment as assessment_storage
from assessor.storage import submission as submission_storage

from ..view.analytics import RecentSubmission, UserAnalyticsResponse

router = APIRouter(prefix="/api/analytics", tags=["analytics"])

RECENT_LIMIT = 5


@router.get("/user", operation_id="get_user_analytics")
@di.inject
def get_user_analytics(
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(di.Manage["storage.persistent.session"]),
) -> UserAnalyticsResponse:
    """Summarize the caller's completed submissions.

    The average is the total score obtained over the total obtainable,
    across every completed submission, as a percentage.
    """
    with session.begin():
        completed = submission_storage.find(
            participant_id=auth.user.user_id,
            status=SubmissionStatus.Completed,
            session=session,
        )
        assessments = {
            a.assessment_id: a
            for a in assessment_storage.find(assessment_ids={s.assessment_id for s in completed}, session=session)
        }

    obtained = sum(s.total_score for s in completed)
    possible = sum(s.max_score for s in completed)
    recent = sorted(completed, key=lambda s: s.end_time or s.start_time, reverse=True)[:RECENT_LIMIT]

    return UserAnalyticsResponse(
        assessments_taken=len(completed),
        average_score=percentage(obtained, possible),
        recent_submissions=[
            RecentSubmission(
                submission_id=s.submission_id,
                assessment_id=s.assessment_id,
                title=assessments[s.assessment_id].title if s.assessment_id in assessments else None,
                date=s.end_time or s.start_time,
                score=s.total_score,
                max_score=s.max_score,
                percentage=s.percentage,
            )
            for s in recent
        ],
    )
