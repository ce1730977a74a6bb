from __future__ import annotations

"""History recorder: turns a finished session into a persisted history entry."""

import logging
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from storage.schema import HistoryEntry, HistoryLog, QuestionOutcome, ScoreSummary
from ..app.explain import trace as xtrace
from ..errors import HistoryStoreError
from ..models import QuizSession, SessionState

if TYPE_CHECKING:
    from storage.store import HistoryRepository

_log = logging.getLogger(__name__)


def build_entry(session: QuizSession) -> HistoryEntry:
    """Summarise a finished session as one history entry.

    `obtained` is the correct count; per-question time is the time spent
    while that question was current.
    """
    if session.state is not SessionState.FINISHED or session.score is None:
        raise ValueError("only finished sessions can be recorded")
    score = session.score
    return HistoryEntry(
        id=session.id,
        subject_id=session.subject,
        subject_name=session.subject,
        score=ScoreSummary(
            obtained=score.correct,
            total=score.total,
            percentage=score.percentage,
        ),
        questions=[
            QuestionOutcome(
                question_id=a.question.id,
                topic=a.question.topic_label,
                is_correct=a.is_correct,
                time_spent=a.time_spent,
            )
            for a in session.attempts
        ],
        completed_at=session.finished_at,
    )


class HistoryRecorder:
    def __init__(self, repository: "HistoryRepository") -> None:
        self.repository = repository

    def record(self, session: Optional[QuizSession]) -> Optional[HistoryLog]:
        """Append the session to its subject log and return the updated log.

        Returns None for sessions that are not finished, and when the history
        entry cannot be built or stored (logged; the finished result stays on screen).
        """
        if session is None or session.state is not SessionState.FINISHED:
            return None
        try:
            log = self.repository.append(session.subject, build_entry(session))
        except (HistoryStoreError, ValidationError):
            _log.error("Could not record session %s for %s", session.id, session.subject, exc_info=True)
            return None
        xtrace(
            "history_recorded",
            {
                "subject": log.subject,
                "session": session.id,
                "attempts": log.aggregate.total_attempts,
                "average": round(log.aggregate.average_score, 2),
            },
        )
        return log
