from __future__ import annotations

import pytest

from assessor.lib.util import utcnow
from assessor.llm.evaluation import apply_overrides, build_record, GradeOverride, overall_feedback, \
    ScoreOutOfRange, UnknownQuestion
from assessor.llm.evaluation.record import FEEDBACK_THRESHOLDS, FOUNDATIONAL_FEEDBACK
from assessor.model import Assessment, AssessmentID, EvaluationResult, Question, QuestionID, QuestionType, \
    Submission, SubmissionID, SubmissionStatus, UserID


@pytest.fixture
def questions() -> list[Question]:
    return [
        Question(type=QuestionType.SingleAnswer, prompt="Pick B", options=["A", "B"], correct_answer="B"),
        Question(type=QuestionType.FreeText, prompt="Explain", points=3),
    ]


@pytest.fixture
def assessment(questions: list[Question]) -> Assessment:
    return Assessment(
        assessment_id=AssessmentID(),
        title="Basics",
        questions=questions,
        author_id=UserID(),
        create_time=utcnow(),
    )


@pytest.fixture
def results(questions: list[Question]) -> list[EvaluationResult]:
    mc, free = questions
    return [
        EvaluationResult(question_id=mc.question_id, score=1, max_score=1, feedback="Correct.", is_correct=True),
        EvaluationResult(question_id=free.question_id, score=0, max_score=3, feedback="Vague."),
    ]


@pytest.fixture
def submission(assessment: Assessment) -> Submission:
    now = utcnow()
    return Submission(
        submission_id=SubmissionID(),
        participant_id=UserID(),
        assessment_id=assessment.assessment_id,
        status=SubmissionStatus.Completed,
        start_time=now,
        end_time=now,
        create_time=now,
        update_time=now,
    )


@pytest.fixture
def scored(assessment: Assessment, submission: Submission, results: list[EvaluationResult]) -> Submission:
    return build_record(assessment, submission, results)


class TestOverallFeedback(object):
    @pytest.mark.parametrize(
        "pct,index",
        [(100, 0), (85, 0), (84.9, 1), (70, 1), (69.9, 2), (50, 2)],
    )
    def test_thresholds(self, pct: float, index: int) -> None:
        assert overall_feedback(pct) == FEEDBACK_THRESHOLDS[index][1]

    @pytest.mark.parametrize("pct", [49.9, 25, 0])
    def test_foundational(self, pct: float) -> None:
        assert overall_feedback(pct) == FOUNDATIONAL_FEEDBACK


class TestBuildRecord(object):
    def test_attaches_totals(self, scored: Submission, results: list[EvaluationResult]) -> None:
        assert scored.results == results
        assert scored.total_score == 1
        assert scored.max_score == 4
        assert scored.percentage == 25
        assert scored.feedback == FOUNDATIONAL_FEEDBACK
        assert [c.name for c in scored.categories] == ["Multiple Choice", "Descriptive"]

    def test_does_not_modify_input(self, submission: Submission, scored: Submission) -> None:
        assert submission.results == []
        assert submission.total_score == 0

    def test_unknown_question(self, assessment: Assessment, submission: Submission) -> None:
        stray = EvaluationResult(question_id=QuestionID(), score=0, max_score=1, feedback="")
        with pytest.raises(UnknownQuestion):
            build_record(assessment, submission, [stray])


class TestApplyOverrides(object):
    def test_override_recomputes_totals(self, assessment: Assessment, scored: Submission) -> None:
        free = assessment.questions[1]

        updated = apply_overrides(assessment, scored, [GradeOverride(free.question_id, 3, "Reviewed by hand.")])

        assert updated.total_score == 4
        assert updated.max_score == 4
        assert updated.percentage == 100
        assert updated.feedback == FEEDBACK_THRESHOLDS[0][1]
        result = updated.results[1]
        assert result.score == 3
        assert result.feedback == "Reviewed by hand."
        assert result.overridden is True

    def test_other_results_untouched(self, assessment: Assessment, scored: Submission) -> None:
        free = assessment.questions[1]

        updated = apply_overrides(assessment, scored, [GradeOverride(free.question_id, 2)])

        assert updated.results[0] == scored.results[0]
        assert updated.results[1].feedback == "Vague."
        assert [r.question_id for r in updated.results] == [r.question_id for r in scored.results]

    def test_single_answer_override_updates_correctness(self, assessment: Assessment, scored: Submission) -> None:
        mc = assessment.questions[0]

        updated = apply_overrides(assessment, scored, [GradeOverride(mc.question_id, 0)])

        assert updated.results[0].is_correct is False
        assert updated.total_score == 0

    def test_explicit_feedback(self, assessment: Assessment, scored: Submission) -> None:
        updated = apply_overrides(assessment, scored, [], feedback="See me after class.")
        assert updated.feedback == "See me after class."
        assert updated.total_score == scored.total_score

    def test_unknown_question(self, assessment: Assessment, scored: Submission) -> None:
        with pytest.raises(UnknownQuestion):
            apply_overrides(assessment, scored, [GradeOverride(QuestionID(), 1)])

    @pytest.mark.parametrize("score", [-1, 3.5])
    def test_score_out_of_range(self, assessment: Assessment, scored: Submission, score: float) -> None:
        free = assessment.questions[1]
        with pytest.raises(ScoreOutOfRange):
            apply_overrides(assessment, scored, [GradeOverride(free.question_id, score)])
