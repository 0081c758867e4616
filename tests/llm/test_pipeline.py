"""Tests for the submission scoring pipeline."""

from __future__ import annotations

import asyncio
import datetime
import json
from unittest.mock import AsyncMock, MagicMock

import jinja2
import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage

from assessor.lib.util import utcnow
from assessor.llm.evaluation import InvalidTransition, ScoringPipeline, SubmissionContext
from assessor.llm.evaluation.evaluator import ERROR_FEEDBACK
from assessor.model import Answer, Assessment, AssessmentID, Question, QuestionType, Submission, SubmissionID, \
    SubmissionStatus, UserID


def unreachable_model() -> MagicMock:
    model = MagicMock(spec=BaseChatModel)
    model.ainvoke = AsyncMock(side_effect=ConnectionError("connection refused"))
    return model


def replying_model(score: float, max_score: float, feedback: str = "Fine.") -> MagicMock:
    model = MagicMock(spec=BaseChatModel)
    reply = json.dumps({"score": score, "maxScore": max_score, "feedback": feedback})
    model.ainvoke = AsyncMock(return_value=AIMessage(content=reply))
    return model


@pytest.fixture
def now() -> datetime.datetime:
    return utcnow()


@pytest.fixture
def assessment(now: datetime.datetime) -> Assessment:
    return Assessment(
        assessment_id=AssessmentID(),
        title="Fundamentals",
        questions=[
            Question(type=QuestionType.SingleAnswer, prompt="Pick B", options=["A", "B"], correct_answer="B"),
            Question(type=QuestionType.FreeText, prompt="Explain recursion", points=3),
        ],
        author_id=UserID(),
        create_time=now,
    )


@pytest.fixture
def submission(assessment: Assessment, now: datetime.datetime) -> Submission:
    return Submission(
        submission_id=SubmissionID(),
        participant_id=UserID(),
        assessment_id=assessment.assessment_id,
        start_time=now,
        create_time=now,
        update_time=now,
    )


@pytest.fixture
def context(assessment: Assessment, submission: Submission, now: datetime.datetime) -> SubmissionContext:
    ctx = SubmissionContext(assessment, submission)
    mc, free = assessment.questions
    ctx.edit_answer(mc, "B", now)
    ctx.edit_answer(free, "A function that calls itself.", now)
    return ctx


class TestSubmissionContext(object):
    def test_rejects_foreign_submission(self, assessment: Assessment, submission: Submission) -> None:
        other = submission.model_copy(update={"assessment_id": AssessmentID()})
        with pytest.raises(ValueError):
            SubmissionContext(assessment, other)

    def test_edit_answer_replaces_and_orders(
        self, assessment: Assessment, submission: Submission, now: datetime.datetime
    ) -> None:
        ctx = SubmissionContext(assessment, submission)
        mc, free = assessment.questions

        ctx.edit_answer(free, "first draft", now)
        ctx.edit_answer(mc, "A", now)
        ctx.edit_answer(free, "second draft", now)

        assert [a.question_id for a in ctx.answers] == [mc.question_id, free.question_id]
        assert ctx.answers[1].content == "second draft"

    def test_edit_answer_unknown_question(self, context: SubmissionContext, now: datetime.datetime) -> None:
        stray = Question(type=QuestionType.FreeText, prompt="Not in this assessment")
        with pytest.raises(ValueError):
            context.edit_answer(stray, "answer", now)

    def test_freeze(self, context: SubmissionContext, now: datetime.datetime) -> None:
        frozen = context.freeze(now, time_expired=True)

        assert frozen.status is SubmissionStatus.Evaluating
        assert frozen.end_time == now
        assert frozen.time_expired is True

    def test_no_edits_after_freeze(self, context: SubmissionContext, now: datetime.datetime) -> None:
        context.freeze(now)
        with pytest.raises(InvalidTransition):
            context.edit_answer(context.assessment.questions[0], "A", now)

    def test_cannot_freeze_twice(self, context: SubmissionContext, now: datetime.datetime) -> None:
        context.freeze(now)
        with pytest.raises(InvalidTransition):
            context.freeze(now)

    def test_cannot_complete_in_progress(self, context: SubmissionContext, now: datetime.datetime) -> None:
        with pytest.raises(InvalidTransition):
            context.complete(now)


class TestScoringPipeline(object):
    def test_unreachable_service(self, context: SubmissionContext, llm_env: jinja2.Environment) -> None:
        pipeline = ScoringPipeline(unreachable_model(), llm_env, timeout=1)

        submission = asyncio.run(pipeline.evaluate(context))

        assert submission.status is SubmissionStatus.Completed
        assert submission.total_score == 1
        assert submission.max_score == 4
        first, second = submission.results
        assert first.is_correct is True
        assert first.score == 1
        assert second.score == 0
        assert second.max_score == 3
        assert second.feedback == ERROR_FEEDBACK

    def test_scores_with_service(self, context: SubmissionContext, llm_env: jinja2.Environment) -> None:
        model = replying_model(2, 3, "Mostly right.")
        pipeline = ScoringPipeline(model, llm_env)

        submission = asyncio.run(pipeline.evaluate(context))

        assert submission.total_score == 3
        assert submission.max_score == 4
        assert submission.percentage == 75
        assert submission.results[1].feedback == "Mostly right."
        # single-answer questions never reach the service
        model.ainvoke.assert_awaited_once()

    def test_scores_are_clamped(self, context: SubmissionContext, llm_env: jinja2.Environment) -> None:
        pipeline = ScoringPipeline(replying_model(7, 3), llm_env)

        submission = asyncio.run(pipeline.evaluate(context))

        assert submission.results[1].score == 3
        assert submission.total_score == 4

    def test_unanswered_questions_are_scored(
        self, assessment: Assessment, submission: Submission, llm_env: jinja2.Environment
    ) -> None:
        model = replying_model(0, 3, "No answer.")
        pipeline = ScoringPipeline(model, llm_env)

        scored = asyncio.run(pipeline.evaluate(SubmissionContext(assessment, submission)))

        assert [r.question_id for r in scored.results] == [q.question_id for q in assessment.questions]
        assert scored.results[0].is_correct is False
        assert scored.total_score == 0

    def test_results_keep_question_order(self, context: SubmissionContext, llm_env: jinja2.Environment) -> None:
        submission = asyncio.run(ScoringPipeline(replying_model(1, 3), llm_env).evaluate(context))
        assert [r.question_id for r in submission.results] == [q.question_id for q in context.assessment.questions]

    def test_evaluate_requires_in_progress(self, context: SubmissionContext, llm_env: jinja2.Environment) -> None:
        pipeline = ScoringPipeline(replying_model(1, 3), llm_env)
        asyncio.run(pipeline.evaluate(context))

        with pytest.raises(InvalidTransition):
            asyncio.run(pipeline.evaluate(context))

    def test_score_requires_evaluating(self, context: SubmissionContext, llm_env: jinja2.Environment) -> None:
        pipeline = ScoringPipeline(replying_model(1, 3), llm_env)
        with pytest.raises(InvalidTransition):
            asyncio.run(pipeline.score(context))

    def test_score_question_single_answer(self, assessment: Assessment, llm_env: jinja2.Environment) -> None:
        model = unreachable_model()
        mc = assessment.questions[0]

        result = asyncio.run(
            ScoringPipeline(model, llm_env).score_question(mc, Answer(question_id=mc.question_id, content="A"))
        )

        assert result.score == 0
        assert result.is_correct is False
        model.ainvoke.assert_not_awaited()
