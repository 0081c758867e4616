from __future__ import annotations

import datetime
import enum
import typing as t

import pydantic as p

from .base import BaseModel, WithCtime
from .id import AssessmentID, QuestionID, UserID


class QuestionType(enum.Enum):
    SingleAnswer = "single_answer"
    FreeText = "free_text"
    CodeSubmission = "code_submission"
    SpokenResponse = "spoken_response"

    @property
    def default_max_score(self) -> int:
        """Maximum score assumed when the evaluator does not report one"""
        return _default_max_scores[self]

    @property
    def category(self) -> str:
        return _categories[self]

    @property
    def is_objective(self) -> bool:
        return self is QuestionType.SingleAnswer


_default_max_scores: dict[QuestionType, int] = {
    QuestionType.SingleAnswer: 1,
    QuestionType.FreeText: 3,
    QuestionType.CodeSubmission: 5,
    QuestionType.SpokenResponse: 3,
}

_categories: dict[QuestionType, str] = {
    QuestionType.SingleAnswer: "Multiple Choice",
    QuestionType.FreeText: "Descriptive",
    QuestionType.CodeSubmission: "Practical",
    QuestionType.SpokenResponse: "Spoken Response",
}


class Question(BaseModel):
    question_id: QuestionID = p.Field(default_factory=QuestionID)
    type: QuestionType
    prompt: t.Annotated[str, p.StringConstraints(strip_whitespace=True, min_length=1)]
    options: list[str] = []
    correct_answer: str | None = None
    points: p.PositiveInt = 1
    evaluation_criteria: str | None = None

    @p.model_validator(mode="after")
    def check_answer_key(self) -> t.Self:
        if self.type.is_objective:
            if len(self.options) < 2:
                raise ValueError("single-answer questions need at least two options")
            if self.correct_answer is None:
                raise ValueError("single-answer questions need a correct answer")
            if self.correct_answer not in self.options:
                raise ValueError("correct answer must be one of the options")
        return self


class Assessment(WithCtime):
    assessment_id: AssessmentID
    title: str
    description: str | None = None
    time_limit_minutes: p.PositiveInt | None = None
    questions: t.Annotated[list[Question], p.Field(min_length=1)]
    author_id: UserID

    @p.field_validator("questions")
    @classmethod
    def check_unique_question_ids(cls, questions: list[Question]) -> list[Question]:
        seen: set[QuestionID] = set()
        for q in questions:
            if q.question_id in seen:
                raise ValueError(f"duplicate question id {q.question_id}")
            seen.add(q.question_id)
        return questions

    @property
    def time_limit(self) -> datetime.timedelta | None:
        if self.time_limit_minutes is None:
            return None
        return datetime.timedelta(minutes=self.time_limit_minutes)

    def get_question(self, question_id: QuestionID) -> Question | None:
        for q in self.questions:
            if q.question_id == question_id:
                return q
        return None
