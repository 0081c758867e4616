"""Client for the external evaluation service."""

from __future__ import annotations

import asyncio
import logging

import jinja2
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import HumanMessage, SystemMessage

from assessor.llm.provider import message_text
from assessor.model import QuestionType

from .errors import EvaluationServiceError
from .parser import parse, ParsedEvaluation
from .request import EvaluationRequest

logger = logging.getLogger(__name__)

ERROR_FEEDBACK = "Error in evaluation. Please contact support if this persists."

SYSTEM_PROMPT = "You are an expert evaluator. Respond with a single JSON object."


def error_evaluation(question_type: QuestionType) -> ParsedEvaluation:
    """Result recorded for a question whose evaluation failed outright."""
    return ParsedEvaluation(
        score=0,
        max_score=question_type.default_max_score,
        feedback=ERROR_FEEDBACK,
        model_answer=None,
    )


def render_prompt(request: EvaluationRequest, env: jinja2.Environment) -> str:
    template = env.get_template("evaluation/evaluate_answer.j2")
    return template.render(
        question_type=request.question_type.value,
        prompt=request.prompt,
        answer=request.answer,
        criteria=request.criteria,
        max_score=request.question_type.default_max_score,
    )


async def request_evaluation(
    request: EvaluationRequest,
    model: BaseChatModel,
    env: jinja2.Environment,
    *,
    timeout: float | None = None,
) -> str:
    """One call to the evaluation service; returns the raw reply text.

    Raises:
        EvaluationServiceError: the call failed, timed out or came back empty
    """
    prompt = render_prompt(request, env)
    messages = [SystemMessage(content=SYSTEM_PROMPT), HumanMessage(content=prompt)]

    try:
        response = await asyncio.wait_for(model.ainvoke(messages), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise EvaluationServiceError(f"evaluation timed out after {timeout}s") from e
    except Exception as e:
        raise EvaluationServiceError(str(e) or e.__class__.__name__) from e

    text = message_text(response)
    if not text.strip():
        raise EvaluationServiceError("empty reply from evaluation service")
    return text


async def evaluate_answer(
    request: EvaluationRequest,
    model: BaseChatModel,
    env: jinja2.Environment,
    *,
    timeout: float | None = None,
) -> ParsedEvaluation:
    """Score a free-form answer with the external evaluation service.

    Exactly one attempt is made. Never raises: a failed call or any other
    error produces a zero score with the type's default maximum and an
    explanatory feedback message.
    """
    try:
        raw = await request_evaluation(request, model, env, timeout=timeout)
        return parse(raw, request.question_type)
    except EvaluationServiceError as e:
        logger.warning(
            "evaluation service failed",
            extra={"question_id": request.question_id, "question_type": request.question_type, "error": str(e)},
        )
    except Exception:
        logger.exception(
            "failed to evaluate answer",
            extra={"question_id": request.question_id, "question_type": request.question_type},
        )
    return error_evaluation(request.question_type)
