"""View models for the assessment platform API."""

__all__ = [
    # Auth views
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
    # Assessment views
    "AssessmentCreateRequest",
    "AssessmentListResponse",
    "AssessmentResponse",
    "AssessmentSummaryResponse",
    "QuestionRequest",
    "QuestionResponse",
    # Submission views
    "AnswerRequest",
    "GradeRequest",
    "GradeRequestItem",
    "StartSubmissionRequest",
    "SubmissionListResponse",
    "SubmissionResponse",
    "SubmissionSummaryResponse",
    "SubmitRequest",
    # Analytics views
    "RecentSubmission",
    "UserAnalyticsResponse",
]

from .analytics import RecentSubmission, UserAnalyticsResponse
from .assessment import AssessmentCreateRequest, AssessmentListResponse, AssessmentResponse, \
    AssessmentSummaryResponse, QuestionRequest, QuestionResponse
from .auth import LoginRequest, LoginResponse, RegisterRequest, TokenResponse, UserResponse
from .submission import AnswerRequest, GradeRequest, GradeRequestItem, StartSubmissionRequest, \
    SubmissionListResponse, SubmissionResponse, SubmissionSummaryResponse, SubmitRequest
