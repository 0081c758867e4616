"""View models for authoring and reading assessments."""

from __future__ import annotations

import datetime
import typing as t

import pydantic as p

from assessor.model import Assessment, AssessmentID, BaseModel, Question, QuestionID, QuestionType, User, UserID


class QuestionRequest(BaseModel):
    """One question of a new assessment; identifiers are assigned by the server."""

    type: QuestionType
    prompt: t.Annotated[str, p.StringConstraints(strip_whitespace=True, min_length=1)]
    options: list[str] = []
    correct_answer: str | None = None
    points: p.PositiveInt = 1
    evaluation_criteria: str | None = None

    @p.model_validator(mode="after")
    def check_answer_key(self) -> t.Self:
        # same rules as the stored question
        self.to_model()
        return self

    def to_model(self) -> Question:
        return Question(
            type=self.type,
            prompt=self.prompt,
            options=self.options,
            correct_answer=self.correct_answer,
            points=self.points,
            evaluation_criteria=self.evaluation_criteria,
        )


class AssessmentCreateRequest(BaseModel):
    title: t.Annotated[str, p.StringConstraints(strip_whitespace=True, min_length=1)]
    description: str | None = None
    time_limit_minutes: p.PositiveInt | None = None
    questions: t.Annotated[list[QuestionRequest], p.Field(min_length=1)]


class QuestionResponse(BaseModel):
    """A question as shown to the caller; answer keys are withheld from participants."""

    question_id: QuestionID
    type: QuestionType
    category: str
    prompt: str
    options: list[str]
    points: int
    correct_answer: str | None = None
    evaluation_criteria: str | None = None

    @classmethod
    def from_model(cls, question: Question, reveal_answers: bool) -> QuestionResponse:
        return cls(
            question_id=question.question_id,
            type=question.type,
            category=question.type.category,
            prompt=question.prompt,
            options=question.options,
            points=question.points,
            correct_answer=question.correct_answer if reveal_answers else None,
            evaluation_criteria=question.evaluation_criteria,
        )


class AssessmentResponse(BaseModel):
    assessment_id: AssessmentID
    title: str
    description: str | None
    time_limit_minutes: int | None
    author_id: UserID
    author_username: str | None
    questions: list[QuestionResponse]
    create_time: datetime.datetime

    @classmethod
    def from_model(cls, assessment: Assessment, author: User | None, reveal_answers: bool) -> AssessmentResponse:
        return cls(
            assessment_id=assessment.assessment_id,
            title=assessment.title,
            description=assessment.description,
            time_limit_minutes=assessment.time_limit_minutes,
            author_id=assessment.author_id,
            author_username=author.username if author else None,
            questions=[QuestionResponse.from_model(q, reveal_answers) for q in assessment.questions],
            create_time=assessment.create_time,
        )


class AssessmentSummaryResponse(BaseModel):
    assessment_id: AssessmentID
    title: str
    description: str | None
    time_limit_minutes: int | None
    question_count: int
    author_id: UserID
    author_username: str | None
    create_time: datetime.datetime

    @classmethod
    def from_model(cls, assessment: Assessment, author: User | None) -> AssessmentSummaryResponse:
        return cls(
            assessment_id=assessment.assessment_id,
            title=assessment.title,
            description=assessment.description,
            time_limit_minutes=assessment.time_limit_minutes,
            question_count=len(assessment.questions),
            author_id=assessment.author_id,
            author_username=author.username if author else None,
            create_time=assessment.create_time,
        )


class AssessmentListResponse(BaseModel):
    assessments: list[AssessmentSummaryResponse]
