"""Reading a structured evaluation out of free-form model replies.

Two independent strategies: `parse_structured` looks for a JSON object
embedded in the reply and fails with `ParseError` when there is none;
`parse_fallback` pulls score/feedback/model answer tokens out of the raw
text with regular expressions and always produces a result. `parse`
tries them in that order.
"""

from __future__ import annotations

import json
import math
import re
import typing as t

from assessor.model import QuestionType

from .errors import ParseError

NO_FEEDBACK = "Unable to generate feedback"
UNPARSEABLE_FEEDBACK = "Unable to parse feedback from the response."

# first "{" through last "}"
_JSON_SPAN = re.compile(r"\{[\s\S]*\}")

_SCORE = re.compile(r"score[\"\s:]+(\d+(?:\.\d+)?)", re.IGNORECASE)
_FEEDBACK = (
    re.compile(r"feedback[\"\s:]+([^\"]*?)(?=\s*[,\"}]|$)", re.IGNORECASE),
    re.compile(r"feedback[\s:]([\s\S]*?)(?=\s*model answer|\s*$)", re.IGNORECASE),
)
_MODEL_ANSWER = (
    re.compile(r"modelAnswer[\"\s:]+([^\"]*?)(?=\s*[,\"}]|$)", re.IGNORECASE),
    re.compile(r"model answer[\s:]([\s\S]*?)(?=\s*$)", re.IGNORECASE),
)


class ParsedEvaluation(t.NamedTuple):
    score: float
    max_score: float
    feedback: str
    model_answer: str | None = None


def parse(raw: str, question_type: QuestionType) -> ParsedEvaluation:
    try:
        return parse_structured(raw, question_type)
    except ParseError:
        return parse_fallback(raw, question_type)


def parse_structured(raw: str, question_type: QuestionType) -> ParsedEvaluation:
    match = _JSON_SPAN.search(raw)
    if match is None:
        raise ParseError("no JSON object in reply")

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ParseError(f"malformed JSON object in reply: {e}") from e
    if not isinstance(data, dict):
        raise ParseError("reply JSON is not an object")

    data = t.cast(dict[str, t.Any], data)
    try:
        score = _number(data.get("score"), default=0)
        max_score = _number(data.get("maxScore"), default=question_type.default_max_score)
    except (TypeError, ValueError) as e:
        raise ParseError(f"non-numeric score in reply: {e}") from e

    return ParsedEvaluation(
        score=score,
        max_score=max_score,
        feedback=_text(data.get("feedback")) or NO_FEEDBACK,
        model_answer=_text(data.get("modelAnswer")) or None,
    )


def parse_fallback(raw: str, question_type: QuestionType) -> ParsedEvaluation:
    m = _SCORE.search(raw)
    score = float(m.group(1)) if m else 0.0

    feedback = _first_group(_FEEDBACK, raw) or UNPARSEABLE_FEEDBACK
    model_answer = _first_group(_MODEL_ANSWER, raw)

    return ParsedEvaluation(
        score=score,
        max_score=question_type.default_max_score,
        feedback=feedback,
        model_answer=model_answer,
    )


def _number(value: t.Any, *, default: float) -> float:
    # missing, null and zero all mean "not given"
    if value is None or value == "" or value == 0 or value is False:
        return float(default)
    if isinstance(value, bool):
        raise TypeError(value)
    n = float(value)
    if math.isnan(n) or math.isinf(n):
        raise ValueError(value)
    return n


def _text(value: t.Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (list, dict)):
        return json.dumps(value)
    return str(value)


def _first_group(patterns: t.Iterable[re.Pattern[str]], raw: str) -> str | None:
    """Group 1 of the first pattern that matches at all; an empty group counts as no match"""
    for pattern in patterns:
        m = pattern.search(raw)
        if m is not None:
            return m.group(1).strip() or None
    return None
