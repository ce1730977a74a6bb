from __future__ import annotations

"""Scoring of a submitted session, with optional negative marking."""

from datetime import datetime
from typing import List

from ..models import QuestionBreakdown, QuestionStatus, QuizScore, QuizSession


def compute_score(session: QuizSession, finished_at: datetime) -> QuizScore:
    """Score every attempt of `session` as of `finished_at`.

    Precedence per attempt: skipped, then unanswered (no selection), then
    correct/incorrect. Marked is counted independently. The percentage is
    clamped at zero so heavy negative marking never reports below 0.
    """
    settings = session.settings
    correct = incorrect = unanswered = skipped = marked = 0
    breakdown: List[QuestionBreakdown] = []

    for attempt in session.attempts:
        question = attempt.question
        if attempt.status is QuestionStatus.SKIPPED:
            skipped += 1
        elif attempt.selection is None:
            unanswered += 1
        elif attempt.is_correct:
            correct += 1
        else:
            incorrect += 1
        if attempt.status.is_marked:
            marked += 1

        breakdown.append(
            QuestionBreakdown(
                question_id=question.id,
                question_text=question.prompt,
                user_answer=attempt.selected_option_id,
                correct_answer=question.correct_option_id,
                is_correct=attempt.is_correct,
                time_spent=attempt.time_spent,
                status=attempt.status,
                explanation=question.explanation if settings.show_explanations else None,
            )
        )

    raw = float(correct)
    if settings.negative_marking:
        raw += incorrect * settings.negative_mark_value

    total = len(session.attempts)
    total_time = 0
    if session.started_at is not None:
        total_time = max(0, int((finished_at - session.started_at).total_seconds()))

    if total == 0:
        percentage = 0.0
        passed = False
        average = 0.0
    else:
        percentage = max(0.0, raw / total * 100)
        passed = percentage >= settings.passing_percentage
        average = total_time / total

    return QuizScore(
        total=total,
        correct=correct,
        incorrect=incorrect,
        unanswered=unanswered,
        skipped=skipped,
        marked=marked,
        raw_score=raw,
        percentage=percentage,
        passed=passed,
        total_time_spent=total_time,
        average_time_per_question=average,
        breakdown=tuple(breakdown),
    )
