"""Shared builders for the test-suite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import List, Optional

from quizsession.config.settings import QuizSettings
from quizsession.models import AnswerOption, QuestionRecord, QuizSession
from quizsession.session.actions import Start
from quizsession.session.store import new_session, transition
from storage.schema import HistoryEntry, QuestionOutcome, ScoreSummary

T0 = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def make_questions(n: int, topic: Optional[str] = None) -> List[QuestionRecord]:
    """n questions with options a..d; the correct one is always 'a'."""
    return [
        QuestionRecord(
            id=f"q{i + 1}",
            prompt=f"Question {i + 1}?",
            options=tuple(AnswerOption(id=oid, text=oid.upper()) for oid in "abcd"),
            correct_option_id="a",
            explanation=f"Because of rule {i + 1}",
            topic=topic,
        )
        for i in range(n)
    ]


def started_session(n: int = 3, settings: Optional[QuizSettings] = None, **kwargs) -> QuizSession:
    session = new_session(make_questions(n), settings, **kwargs)
    return transition(session, Start(at=T0))


def make_entry(
    idx: int,
    percentage: float,
    *,
    subject: str = "math",
    topics: Optional[List[tuple]] = None,
) -> HistoryEntry:
    """A history entry completed idx minutes after T0.

    topics: list of (topic, is_correct, time_spent) tuples.
    """
    topics = topics or [("General", True, 5.0)]
    return HistoryEntry(
        id=f"s{idx}",
        subject_id=subject,
        subject_name=subject,
        score=ScoreSummary(obtained=sum(1 for _, ok, _ in topics if ok), total=len(topics), percentage=percentage),
        questions=[
            QuestionOutcome(question_id=f"q{j}", topic=t, is_correct=ok, time_spent=ts)
            for j, (t, ok, ts) in enumerate(topics)
        ],
        completed_at=T0 + timedelta(minutes=idx),
    )


class FakeClock:
    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now
