from __future__ import annotations

"""Navigation and display statistics derived from a session snapshot."""

from dataclasses import dataclass
from typing import Optional

from ..models import QuestionStatus, QuizSession, SessionState


@dataclass(frozen=True)
class NavigationView:
    can_go_next: bool = False
    can_go_previous: bool = False
    can_submit: bool = False
    current_index: int = 0
    total_questions: int = 0
    answered_count: int = 0
    marked_count: int = 0
    skipped_count: int = 0


EMPTY_NAVIGATION = NavigationView()


def derive_navigation(session: Optional[QuizSession]) -> NavigationView:
    """Compute navigation flags and counts for the current snapshot."""
    if session is None or not session.attempts:
        return EMPTY_NAVIGATION
    attempts = session.attempts
    idx = session.current_question_index
    total = len(attempts)
    answered = sum(1 for a in attempts if a.status.is_answered)
    marked = sum(1 for a in attempts if a.status.is_marked)
    skipped = sum(1 for a in attempts if a.status is QuestionStatus.SKIPPED)
    return NavigationView(
        can_go_next=idx < total - 1,
        can_go_previous=idx > 0,
        can_submit=session.state is SessionState.ACTIVE and answered > 0,
        current_index=idx,
        total_questions=total,
        answered_count=answered,
        marked_count=marked,
        skipped_count=skipped,
    )


@dataclass(frozen=True)
class SessionStats:
    """Summary numbers for display; correctness only once the session is scored."""

    total_questions: int
    answered: int
    unanswered: int
    marked: int
    time_spent: float
    average_time_per_question: float
    correct: Optional[int] = None
    incorrect: Optional[int] = None
    accuracy: Optional[float] = None


def derive_stats(session: Optional[QuizSession]) -> SessionStats:
    if session is None or not session.attempts:
        return SessionStats(0, 0, 0, 0, 0.0, 0.0)
    attempts = session.attempts
    total = len(attempts)
    answered = sum(1 for a in attempts if a.selection is not None and a.status is not QuestionStatus.SKIPPED)
    marked = sum(1 for a in attempts if a.status.is_marked)
    time_spent = sum(a.time_spent for a in attempts)
    correct = incorrect = None
    accuracy = None
    if session.score is not None:
        correct = session.score.correct
        incorrect = session.score.incorrect
        graded = correct + incorrect
        accuracy = (correct / graded * 100) if graded else 0.0
    return SessionStats(
        total_questions=total,
        answered=answered,
        unanswered=total - answered,
        marked=marked,
        time_spent=time_spent,
        average_time_per_question=time_spent / total,
        correct=correct,
        incorrect=incorrect,
        accuracy=accuracy,
    )
