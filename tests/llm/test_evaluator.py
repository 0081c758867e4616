"""Tests for the external evaluation client."""

from __future__ import annotations

import asyncio
import typing as t
from unittest.mock import AsyncMock, MagicMock

import jinja2
import pytest
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from assessor.llm.evaluation import build_request, evaluate_answer, EvaluationRequest, EvaluationServiceError
from assessor.llm.evaluation.evaluator import ERROR_FEEDBACK, render_prompt, request_evaluation
from assessor.model import Answer, Question, QuestionType


def chat_model(**kwargs: t.Any) -> MagicMock:
    model = MagicMock(spec=BaseChatModel)
    model.ainvoke = AsyncMock(**kwargs)
    return model


@pytest.fixture
def question() -> Question:
    return Question(
        type=QuestionType.CodeSubmission,
        prompt="Write a function that reverses a string.",
        evaluation_criteria="Must handle the empty string.",
    )


@pytest.fixture
def request_(question: Question) -> EvaluationRequest:
    return build_request(question, Answer(question_id=question.question_id, content="def r(s): return s[::-1]"))


class TestRenderPrompt(object):
    def test_includes_question_and_answer(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        prompt = render_prompt(request_, llm_env)

        assert "QUESTION TYPE: code_submission" in prompt
        assert "Write a function that reverses a string." in prompt
        assert "def r(s): return s[::-1]" in prompt
        assert "Must handle the empty string." in prompt
        assert "out of 5" in prompt
        assert '"maxScore"' in prompt

    def test_missing_answer_is_marked(self, question: Question, llm_env: jinja2.Environment) -> None:
        prompt = render_prompt(build_request(question, None), llm_env)
        assert "(no answer given)" in prompt

    def test_scale_is_the_type_default(self, question: Question, llm_env: jinja2.Environment) -> None:
        weighted = question.model_copy(update={"points": 4})

        prompt = render_prompt(build_request(weighted, None), llm_env)

        assert "out of 5" in prompt
        assert "out of 4" not in prompt


class TestRequestEvaluation(object):
    def test_sends_system_and_human_messages(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        model = chat_model(return_value=AIMessage(content='{"score": 4}'))

        raw = asyncio.run(request_evaluation(request_, model, llm_env, timeout=5))

        assert raw == '{"score": 4}'
        (messages,), _ = model.ainvoke.call_args
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)

    def test_content_blocks_are_flattened(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        reply = AIMessage(content=[{"type": "text", "text": '{"score": '}, {"type": "text", "text": "4}"}])
        model = chat_model(return_value=reply)

        assert asyncio.run(request_evaluation(request_, model, llm_env)) == '{"score": 4}'

    def test_failure_raises_service_error(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        model = chat_model(side_effect=ConnectionError("unreachable"))

        with pytest.raises(EvaluationServiceError):
            asyncio.run(request_evaluation(request_, model, llm_env))

    def test_empty_reply_raises_service_error(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        model = chat_model(return_value=AIMessage(content="  "))

        with pytest.raises(EvaluationServiceError):
            asyncio.run(request_evaluation(request_, model, llm_env))

    def test_timeout_raises_service_error(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        async def stall(*_: t.Any, **__: t.Any) -> AIMessage:
            await asyncio.sleep(10)
            return AIMessage(content="{}")

        model = chat_model(side_effect=stall)

        with pytest.raises(EvaluationServiceError, match="timed out"):
            asyncio.run(request_evaluation(request_, model, llm_env, timeout=0.01))


class TestEvaluateAnswer(object):
    def test_parses_reply(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        reply = AIMessage(content='Sure. {"score": 4, "maxScore": 5, "feedback": "Good.", "modelAnswer": "s[::-1]"}')
        model = chat_model(return_value=reply)

        result = asyncio.run(evaluate_answer(request_, model, llm_env))

        assert result.score == 4
        assert result.max_score == 5
        assert result.feedback == "Good."
        assert result.model_answer == "s[::-1]"
        model.ainvoke.assert_awaited_once()

    @pytest.mark.parametrize(
        "failure",
        [ConnectionError("unreachable"), TimeoutError(), RuntimeError("boom"), ValueError("bad request")],
    )
    def test_never_raises(self, request_: EvaluationRequest, llm_env: jinja2.Environment, failure: Exception) -> None:
        model = chat_model(side_effect=failure)

        result = asyncio.run(evaluate_answer(request_, model, llm_env))

        assert result.score == 0
        assert result.max_score == 5
        assert result.feedback == ERROR_FEEDBACK
        assert result.model_answer is None

    def test_single_attempt(self, request_: EvaluationRequest, llm_env: jinja2.Environment) -> None:
        model = chat_model(side_effect=ConnectionError("unreachable"))

        asyncio.run(evaluate_answer(request_, model, llm_env))

        assert model.ainvoke.await_count == 1

    def test_template_error_is_contained(self, request_: EvaluationRequest) -> None:
        env = jinja2.Environment(loader=jinja2.DictLoader({}))
        model = chat_model(return_value=AIMessage(content="{}"))

        result = asyncio.run(evaluate_answer(request_, model, env))

        assert result.feedback == ERROR_FEEDBACK
        model.ainvoke.assert_not_awaited()
