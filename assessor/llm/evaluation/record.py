"""Assembling the persisted shape of a scored submission."""

from __future__ import annotations

import typing as t
from collections.abc import Sequence

from assessor.model import Assessment, EvaluationResult, QuestionID, QuestionType, Submission

from .aggregator import aggregate, ScoreSummary
from .errors import ScoreOutOfRange, UnknownQuestion

# (minimum percentage, feedback), checked in order
FEEDBACK_THRESHOLDS: list[tuple[float, str]] = [
    (
        85,
        "Excellent work! You have demonstrated a strong understanding across all question types.",
    ),
    (
        70,
        "Good work! You have a solid grasp of the fundamentals. Focus on strengthening the weaker areas "
        "highlighted in the per-question feedback.",
    ),
    (
        50,
        "You have shown a basic understanding. Review the core principles and practise with more "
        "hands-on examples to improve.",
    ),
]

FOUNDATIONAL_FEEDBACK = (
    "You may need to revisit the foundational concepts. Focus on the basic principles before moving on "
    "to more advanced topics, and consider using additional learning resources."
)


class GradeOverride(t.NamedTuple):
    question_id: QuestionID
    score: float
    feedback: str | None = None


def overall_feedback(percentage: float) -> str:
    for threshold, feedback in FEEDBACK_THRESHOLDS:
        if percentage >= threshold:
            return feedback
    return FOUNDATIONAL_FEEDBACK


def question_types(assessment: Assessment, results: Sequence[EvaluationResult]) -> list[QuestionType]:
    by_id = {q.question_id: q.type for q in assessment.questions}
    types: list[QuestionType] = []
    for r in results:
        if r.question_id not in by_id:
            raise UnknownQuestion(r.question_id)
        types.append(by_id[r.question_id])
    return types


def apply_summary(submission: Submission, summary: ScoreSummary, feedback: str | None = None) -> Submission:
    return submission.model_copy(
        update={
            "total_score": summary.total_score,
            "max_score": summary.max_score,
            "percentage": summary.percentage,
            "categories": summary.categories,
            "feedback": feedback if feedback is not None else overall_feedback(summary.percentage),
        }
    )


def build_record(assessment: Assessment, submission: Submission, results: Sequence[EvaluationResult]) -> Submission:
    """Attach results, totals and overall feedback to a submission."""
    summary = aggregate(results, question_types(assessment, results))
    return apply_summary(submission.model_copy(update={"results": list(results)}), summary)


def apply_overrides(
    assessment: Assessment,
    submission: Submission,
    overrides: Sequence[GradeOverride],
    feedback: str | None = None,
) -> Submission:
    """Replace the listed questions' scores and feedback, then recompute totals.

    Results of questions not listed are untouched. When `feedback` is None
    the overall feedback is re-derived from the new percentage.

    Raises:
        UnknownQuestion: an override names a question with no result
        ScoreOutOfRange: an override score is negative or above the question's maximum
    """
    results = {r.question_id: r for r in submission.results}
    for ov in overrides:
        current = results.get(ov.question_id)
        if current is None:
            raise UnknownQuestion(ov.question_id)
        if ov.score < 0 or ov.score > current.max_score:
            raise ScoreOutOfRange(ov.question_id, ov.score, current.max_score)
        update: dict[str, t.Any] = {"score": ov.score, "overridden": True, "is_evaluated": True}
        if ov.feedback is not None:
            update["feedback"] = ov.feedback
        if current.is_correct is not None:
            update["is_correct"] = ov.score == current.max_score
        results[ov.question_id] = current.model_copy(update=update)

    updated = [results[r.question_id] for r in submission.results]
    summary = aggregate(updated, question_types(assessment, updated))
    return apply_summary(submission.model_copy(update={"results": updated}), summary, feedback)
