from __future__ import annotations

import typing as t
from collections.abc import Sequence

from assessor.model import CategoryScore, EvaluationResult, QuestionType


class ScoreSummary(t.NamedTuple):
    total_score: float
    max_score: float
    percentage: float
    categories: list[CategoryScore]


def percentage(score: float, max_score: float) -> float:
    if max_score <= 0:
        return 0.0
    return score / max_score * 100


def aggregate(results: Sequence[EvaluationResult], question_types: Sequence[QuestionType]) -> ScoreSummary:
    """Totals and per-category breakdown for one submission's results.

    `question_types[i]` is the type of the question scored by `results[i]`.
    Categories appear in QuestionType declaration order; types with no
    questions are left out.
    """
    if len(results) != len(question_types):
        raise ValueError(f"{len(results)} results for {len(question_types)} questions")

    total = sum((r.score for r in results), 0.0)
    max_total = sum((r.max_score for r in results), 0.0)

    buckets: dict[QuestionType, list[EvaluationResult]] = {}
    for result, qtype in zip(results, question_types):
        buckets.setdefault(qtype, []).append(result)

    categories = [
        CategoryScore(
            name=qtype.category,
            score=sum((r.score for r in buckets[qtype]), 0.0),
            total=sum((r.max_score for r in buckets[qtype]), 0.0),
            question_count=len(buckets[qtype]),
        )
        for qtype in QuestionType
        if qtype in buckets
    ]

    return ScoreSummary(
        total_score=total,
        max_score=max_total,
        percentage=percentage(total, max_total),
        categories=categories,
    )
