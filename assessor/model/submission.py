import enum

import pydantic as p

from .base import BaseModel, UTCDateTime, WithTimestamps
from .id import AssessmentID, QuestionID, SubmissionID, UserID


class SubmissionStatus(enum.Enum):
    InProgress = "in_progress"
    Evaluating = "evaluating"
    Completed = "completed"


class Answer(BaseModel):
    question_id: QuestionID
    content: str = ""
    update_time: UTCDateTime | None = None


class EvaluationResult(BaseModel):
    question_id: QuestionID
    score: float = p.Field(ge=0)
    max_score: float = p.Field(ge=0)
    feedback: str
    model_answer: str | None = None
    is_evaluated: bool = True
    is_correct: bool | None = None
    overridden: bool = False


class CategoryScore(BaseModel):
    name: str
    score: float
    total: float
    question_count: int


class Submission(WithTimestamps):
    submission_id: SubmissionID
    participant_id: UserID
    assessment_id: AssessmentID
    status: SubmissionStatus = SubmissionStatus.InProgress

    answers: list[Answer] = []
    results: list[EvaluationResult] = []

    total_score: float = 0
    max_score: float = 0
    percentage: float = 0
    categories: list[CategoryScore] = []
    feedback: str | None = None

    start_time: UTCDateTime
    end_time: UTCDateTime | None = None
    time_expired: bool = False

    def get_answer(self, question_id: QuestionID) -> Answer | None:
        for a in self.answers:
            if a.question_id == question_id:
                return a
        return None
