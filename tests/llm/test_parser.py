"""Tests for reading evaluations out of model replies."""

from __future__ import annotations

import pytest

from assessor.llm.evaluation import parse, ParseError
from assessor.llm.evaluation.parser import NO_FEEDBACK, parse_fallback, parse_structured, UNPARSEABLE_FEEDBACK
from assessor.model import QuestionType


class TestParseStructured(object):
    def test_json_embedded_in_prose(self) -> None:
        raw = 'Here is my evaluation: {"score":2,"maxScore":3,"feedback":"ok"}'

        result = parse_structured(raw, QuestionType.FreeText)

        assert result.score == 2
        assert result.max_score == 3
        assert result.feedback == "ok"
        assert result.model_answer is None

    def test_json_in_markdown_fence(self) -> None:
        raw = '```json\n{"score": 4.5, "maxScore": 5, "feedback": "Tidy.", "modelAnswer": "s[::-1]"}\n```'

        result = parse_structured(raw, QuestionType.CodeSubmission)

        assert result.score == 4.5
        assert result.max_score == 5
        assert result.model_answer == "s[::-1]"

    @pytest.mark.parametrize(
        "qtype,expected",
        [
            (QuestionType.FreeText, 3),
            (QuestionType.CodeSubmission, 5),
            (QuestionType.SpokenResponse, 3),
        ],
    )
    def test_missing_max_score_uses_type_default(self, qtype: QuestionType, expected: int) -> None:
        result = parse_structured('{"score": 1, "feedback": "fine"}', qtype)
        assert result.max_score == expected

    def test_zero_max_score_uses_type_default(self) -> None:
        result = parse_structured('{"score": 1, "maxScore": 0, "feedback": "fine"}', QuestionType.CodeSubmission)
        assert result.max_score == 5

    def test_missing_fields_get_defaults(self) -> None:
        result = parse_structured("{}", QuestionType.FreeText)

        assert result.score == 0
        assert result.max_score == 3
        assert result.feedback == NO_FEEDBACK
        assert result.model_answer is None

    def test_numeric_strings_are_accepted(self) -> None:
        result = parse_structured('{"score": "2", "maxScore": "3", "feedback": "ok"}', QuestionType.FreeText)
        assert (result.score, result.max_score) == (2, 3)

    @pytest.mark.parametrize(
        "raw",
        [
            "no braces at all",
            "{not json}",
            '["score", 1]',
            '{"score": "lots", "feedback": "x"}',
        ],
    )
    def test_unusable_replies_raise(self, raw: str) -> None:
        with pytest.raises(ParseError):
            parse_structured(raw, QuestionType.FreeText)


class TestParseFallback(object):
    def test_extracts_tokens(self) -> None:
        raw = "Score: 2\nFeedback: Covers mutability but not hashing\nModel answer: Lists are mutable."

        result = parse_fallback(raw, QuestionType.FreeText)

        assert result.score == 2
        assert result.max_score == 3
        assert result.feedback.startswith("Covers mutability")
        assert result.model_answer is not None

    def test_nothing_recognisable(self) -> None:
        result = parse_fallback("I cannot grade this.", QuestionType.CodeSubmission)

        assert result.score == 0
        assert result.max_score == 5
        assert result.feedback == UNPARSEABLE_FEEDBACK
        assert result.model_answer is None


class TestParse(object):
    def test_prefers_structured(self) -> None:
        result = parse('{"score": 3, "maxScore": 3, "feedback": "Great"}', QuestionType.FreeText)
        assert result.score == 3
        assert result.feedback == "Great"

    def test_falls_back_on_malformed_json(self) -> None:
        result = parse('{"score": 1, "feedback": "cut off', QuestionType.FreeText)

        assert result.score == 1
        assert result.max_score == 3

    def test_never_raises_on_garbage(self) -> None:
        result = parse("", QuestionType.SpokenResponse)
        assert result.score == 0
        assert result.feedback == UNPARSEABLE_FEEDBACK
