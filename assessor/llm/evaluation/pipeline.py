"""Scoring pipeline orchestrator."""

from __future__ import annotations

import datetime
import logging

import jinja2
from langchain_core.language_models import BaseChatModel

from assessor.lib.util import utcnow
from assessor.model import Answer, Assessment, EvaluationResult, Question, Submission, SubmissionStatus

from .autograder import grade_single_answer
from .errors import InvalidTransition
from .evaluator import evaluate_answer
from .parser import ParsedEvaluation
from .record import build_record
from .request import build_request, EvaluationRequest

logger = logging.getLogger(__name__)


class SubmissionContext(object):
    """State of one submission attempt as it moves through scoring.

    Holds the only mutable state of a scoring run: nothing is shared
    between submissions.
    """

    def __init__(self, assessment: Assessment, submission: Submission):
        if submission.assessment_id != assessment.assessment_id:
            raise ValueError("submission does not belong to this assessment")
        self.assessment = assessment
        self.submission = submission
        self.results: list[EvaluationResult] = []

    @property
    def status(self) -> SubmissionStatus:
        return self.submission.status

    @property
    def answers(self) -> list[Answer]:
        return self.submission.answers

    def edit_answer(self, question: Question, content: str, now: datetime.datetime) -> Submission:
        """Record an answer; only possible while the attempt is in progress."""
        if self.status is not SubmissionStatus.InProgress:
            raise InvalidTransition(self.status, SubmissionStatus.InProgress)
        if self.assessment.get_question(question.question_id) is None:
            raise ValueError(f"question {question.question_id} is not part of this assessment")

        answers = [a for a in self.answers if a.question_id != question.question_id]
        answers.append(Answer(question_id=question.question_id, content=content, update_time=now))
        order = {q.question_id: i for i, q in enumerate(self.assessment.questions)}
        answers.sort(key=lambda a: order[a.question_id])
        self.submission = self.submission.model_copy(update={"answers": answers, "update_time": now})
        return self.submission

    def freeze(self, now: datetime.datetime, time_expired: bool = False) -> Submission:
        """InProgress -> Evaluating: no further answer edits are accepted."""
        if self.status is not SubmissionStatus.InProgress:
            raise InvalidTransition(self.status, SubmissionStatus.Evaluating)
        answers = [a.model_copy() for a in self.answers]
        self.submission = self.submission.model_copy(
            update={
                "status": SubmissionStatus.Evaluating,
                "answers": answers,
                "end_time": now,
                "time_expired": time_expired,
                "update_time": now,
            }
        )
        return self.submission

    def complete(self, now: datetime.datetime) -> Submission:
        """Evaluating -> Completed, attaching results and totals."""
        if self.status is not SubmissionStatus.Evaluating:
            raise InvalidTransition(self.status, SubmissionStatus.Completed)
        scored = build_record(self.assessment, self.submission, self.results)
        self.submission = scored.model_copy(update={"status": SubmissionStatus.Completed, "update_time": now})
        return self.submission


def to_result(request: EvaluationRequest, parsed: ParsedEvaluation) -> EvaluationResult:
    max_score = max(parsed.max_score, 0.0)
    return EvaluationResult(
        question_id=request.question_id,
        score=min(max(parsed.score, 0.0), max_score),
        max_score=max_score,
        feedback=parsed.feedback,
        model_answer=parsed.model_answer,
        is_evaluated=True,
        is_correct=None,
    )


class ScoringPipeline(object):
    """Scores every question of a submission, one at a time, in assessment order.

    Single-answer questions are graded locally; every other type goes to the
    external evaluation service, which is called once per question and never
    concurrently.
    """

    def __init__(
        self,
        model: BaseChatModel,
        env: jinja2.Environment,
        timeout: float | None = None,
    ) -> None:
        self._model = model
        self._env = env
        self._timeout = timeout

    async def score_question(self, question: Question, answer: Answer | None) -> EvaluationResult:
        if question.type.is_objective:
            return grade_single_answer(question, answer)
        request = build_request(question, answer)
        parsed = await evaluate_answer(request, self._model, self._env, timeout=self._timeout)
        return to_result(request, parsed)

    async def score(self, context: SubmissionContext, now: datetime.datetime | None = None) -> Submission:
        """Evaluating -> Completed for a frozen submission."""
        if context.status is not SubmissionStatus.Evaluating:
            raise InvalidTransition(context.status, SubmissionStatus.Completed)

        context.results = []
        for question in context.assessment.questions:
            answer = context.submission.get_answer(question.question_id)
            result = await self.score_question(question, answer)
            context.results.append(result)
            logger.debug(
                "scored question",
                extra={
                    "submission_id": context.submission.submission_id,
                    "question_id": question.question_id,
                    "score": result.score,
                    "max_score": result.max_score,
                },
            )

        submission = context.complete(now or utcnow())
        logger.info(
            "scored submission",
            extra={
                "submission_id": submission.submission_id,
                "total_score": submission.total_score,
                "max_score": submission.max_score,
            },
        )
        return submission

    async def evaluate(
        self, context: SubmissionContext, now: datetime.datetime | None = None, time_expired: bool = False
    ) -> Submission:
        """InProgress -> Evaluating -> Completed."""
        now = now or utcnow()
        context.freeze(now, time_expired=time_expired)
        return await self.score(context, now)
