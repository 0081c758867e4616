from __future__ import annotations

import typing as t

from assessor.model import Answer, Question, QuestionID, QuestionType


class EvaluationRequest(t.NamedTuple):
    """Everything needed to score one answer"""

    question_id: QuestionID
    question_type: QuestionType
    prompt: str
    answer: str
    criteria: str
    points: int


def build_request(question: Question, answer: Answer | None) -> EvaluationRequest:
    """Package a question and the participant's answer (if any) for scoring."""
    return EvaluationRequest(
        question_id=question.question_id,
        question_type=question.type,
        prompt=question.prompt,
        answer=answer.content if answer is not None else "",
        criteria=question.evaluation_criteria or "",
        points=question.points,
    )
