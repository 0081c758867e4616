"""Exceptions for answer scoring."""

from __future__ import annotations

import typing as t

if t.TYPE_CHECKING:
    from assessor.model import QuestionID, SubmissionStatus


class EvaluationError(Exception):
    """Error in the scoring pipeline."""

    pass


class EvaluationServiceError(EvaluationError):
    """The external evaluation service failed, timed out or sent back nothing usable."""

    pass


class ParseError(EvaluationError):
    """No structured evaluation could be read out of a reply."""

    pass


class InvalidTransition(EvaluationError):
    """A submission cannot move from its current status to the requested one."""

    def __init__(self, current: SubmissionStatus, target: SubmissionStatus):
        super().__init__(f"cannot move submission from {current.value} to {target.value}")
        self.current = current
        self.target = target


class UnknownQuestion(EvaluationError):
    def __init__(self, question_id: QuestionID):
        super().__init__(f"question {question_id} is not part of this submission")
        self.question_id = question_id


class ScoreOutOfRange(EvaluationError):
    def __init__(self, question_id: QuestionID, score: float, max_score: float):
        super().__init__(f"score {score} for question {question_id} is outside 0..{max_score}")
        self.question_id = question_id
        self.score = score
        self.max_score = max_score
