__all__ = [
    # Base
    "BaseModel",
    "UTCDateTime",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "UserID",
    "AssessmentID",
    "QuestionID",
    "SubmissionID",
    # User
    "User",
    "UserRole",
    # Assessments
    "Assessment",
    "Question",
    "QuestionType",
    # Submissions
    "Answer",
    "CategoryScore",
    "EvaluationResult",
    "Submission",
    "SubmissionStatus",
]

from .assessment import Assessment, Question, QuestionType
from .base import BaseModel, UTCDateTime, WithCtime, WithMtime, WithTimestamps
from .enum import DeploymentEnvironment
from .id import AssessmentID, QuestionID, SubmissionID, UserID
from .submission import Answer, CategoryScore, EvaluationResult, Submission, SubmissionStatus
from .user import User, UserRole
