"""View models for participant analytics."""

from __future__ import annotations

import datetime

from assessor.model import AssessmentID, BaseModel, SubmissionID


class RecentSubmission(BaseModel):
    submission_id: SubmissionID
    assessment_id: AssessmentID
    title: str | None
    date: datetime.datetime
    score: float
    max_score: float
    percentage: float


class UserAnalyticsResponse(BaseModel):
    assessments_taken: int
    average_score: float
    recent_submissions: list[RecentSubmission]
