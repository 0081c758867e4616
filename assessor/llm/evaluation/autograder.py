"""Local scoring of single-answer questions."""

from assessor.model import Answer, EvaluationResult, Question


def grade_single_answer(question: Question, answer: Answer | None) -> EvaluationResult:
    """Exact, case-sensitive match against the stored correct option.

    Awards the question's full points or nothing.
    """
    content = answer.content if answer is not None else None
    is_correct = content is not None and content == question.correct_answer
    if is_correct:
        feedback = "Correct."
    elif not content:
        feedback = "No answer was given."
    else:
        feedback = "Incorrect."

    return EvaluationResult(
        question_id=question.question_id,
        score=question.points if is_correct else 0,
        max_score=question.points,
        feedback=feedback,
        model_answer=None if is_correct else question.correct_answer,
        is_evaluated=True,
        is_correct=is_correct,
    )
