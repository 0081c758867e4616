"""Submission scoring: auto-grading, external evaluation, aggregation."""

__all__ = [
    "EvaluationError",
    "EvaluationRequest",
    "EvaluationServiceError",
    "GradeOverride",
    "InvalidTransition",
    "ParsedEvaluation",
    "ParseError",
    "ScoreOutOfRange",
    "ScoreSummary",
    "ScoringPipeline",
    "SubmissionContext",
    "UnknownQuestion",
    "aggregate",
    "apply_overrides",
    "build_record",
    "build_request",
    "evaluate_answer",
    "grade_single_answer",
    "overall_feedback",
    "parse",
]

from .aggregator import aggregate, ScoreSummary
from .autograder import grade_single_answer
from .errors import EvaluationError, EvaluationServiceError, InvalidTransition, ParseError, ScoreOutOfRange, \
    UnknownQuestion
from .evaluator import evaluate_answer
from .parser import parse, ParsedEvaluation
from .pipeline import ScoringPipeline, SubmissionContext
from .record import apply_overrides, build_record, GradeOverride, overall_feedback
from .request import build_request, EvaluationRequest
