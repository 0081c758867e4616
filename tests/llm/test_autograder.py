"""Tests for local grading of single-answer questions."""

from __future__ import annotations

import pytest

from assessor.llm.evaluation import grade_single_answer
from assessor.model import Answer, Question, QuestionType


@pytest.fixture
def question() -> Question:
    return Question(
        type=QuestionType.SingleAnswer,
        prompt="Pick B",
        options=["A", "B"],
        correct_answer="B",
        points=2,
    )


class TestGradeSingleAnswer(object):
    def test_correct_answer_scores_full_points(self, question: Question) -> None:
        result = grade_single_answer(question, Answer(question_id=question.question_id, content="B"))

        assert result.score == 2
        assert result.max_score == 2
        assert result.is_correct is True
        assert result.model_answer is None
        assert result.feedback == "Correct."

    @pytest.mark.parametrize("content", ["A", "b", " B", "B ", "C"])
    def test_anything_but_an_exact_match_scores_zero(self, question: Question, content: str) -> None:
        result = grade_single_answer(question, Answer(question_id=question.question_id, content=content))

        assert result.score == 0
        assert result.max_score == 2
        assert result.is_correct is False
        assert result.model_answer == "B"
        assert result.feedback == "Incorrect."

    def test_missing_answer_scores_zero(self, question: Question) -> None:
        result = grade_single_answer(question, None)

        assert result.score == 0
        assert result.is_correct is False
        assert result.feedback == "No answer was given."

    def test_empty_answer_scores_zero(self, question: Question) -> None:
        result = grade_single_answer(question, Answer(question_id=question.question_id, content=""))

        assert result.score == 0
        assert result.feedback == "No answer was given."

    def test_result_is_for_the_graded_question(self, question: Question) -> None:
        result = grade_single_answer(question, None)
        assert result.question_id == question.question_id
        assert result.is_evaluated is True
