"""View models for taking assessments and reviewing submissions."""

from __future__ import annotations

import datetime

import pydantic as p

from assessor.model import Answer, Assessment, AssessmentID, BaseModel, CategoryScore, EvaluationResult, QuestionID, \
    Submission, SubmissionID, SubmissionStatus, UserID, UTCDateTime


class AnswerRequest(BaseModel):
    question_id: QuestionID
    content: str = ""


class SubmitRequest(BaseModel):
    """One-shot submission of a complete set of answers."""

    assessment_id: AssessmentID
    answers: list[AnswerRequest] = []
    start_time: UTCDateTime | None = None
    time_expired: bool = False


class StartSubmissionRequest(BaseModel):
    assessment_id: AssessmentID


class GradeRequestItem(BaseModel):
    question_id: QuestionID
    score: float = p.Field(ge=0)
    feedback: str | None = None


class GradeRequest(BaseModel):
    """Manual score overrides for a completed submission."""

    grades: list[GradeRequestItem] = []
    feedback: str | None = None


class SubmissionResponse(BaseModel):
    submission_id: SubmissionID
    participant_id: UserID
    assessment_id: AssessmentID
    assessment_title: str | None
    status: SubmissionStatus
    answers: list[Answer]
    results: list[EvaluationResult]
    total_score: float
    max_score: float
    percentage: float
    categories: list[CategoryScore]
    feedback: str | None
    start_time: datetime.datetime
    end_time: datetime.datetime | None
    deadline: datetime.datetime | None
    time_expired: bool

    @classmethod
    def from_model(cls, submission: Submission, assessment: Assessment | None) -> SubmissionResponse:
        deadline = None
        if assessment is not None and assessment.time_limit is not None:
            deadline = submission.start_time + assessment.time_limit
        return cls(
            submission_id=submission.submission_id,
            participant_id=submission.participant_id,
            assessment_id=submission.assessment_id,
            assessment_title=assessment.title if assessment else None,
            status=submission.status,
            answers=submission.answers,
            results=submission.results,
            total_score=submission.total_score,
            max_score=submission.max_score,
            percentage=submission.percentage,
            categories=submission.categories,
            feedback=submission.feedback,
            start_time=submission.start_time,
            end_time=submission.end_time,
            deadline=deadline,
            time_expired=submission.time_expired,
        )


class SubmissionSummaryResponse(BaseModel):
    submission_id: SubmissionID
    participant_id: UserID
    assessment_id: AssessmentID
    assessment_title: str | None
    status: SubmissionStatus
    total_score: float
    max_score: float
    percentage: float
    start_time: datetime.datetime
    end_time: datetime.datetime | None

    @classmethod
    def from_model(cls, submission: Submission, assessment: Assessment | None) -> SubmissionSummaryResponse:
        return cls(
            submission_id=submission.submission_id,
            participant_id=submission.participant_id,
            assessment_id=submission.assessment_id,
            assessment_title=assessment.title if assessment else None,
            status=submission.status,
            total_score=submission.total_score,
            max_score=submission.max_score,
            percentage=submission.percentage,
            start_time=submission.start_time,
            end_time=submission.end_time,
        )


class SubmissionListResponse(BaseModel):
    submissions: list[SubmissionSummaryResponse]
