from __future__ import annotations

"""Session store: the transition table for one quiz attempt.

`transition(session, action)` is pure and total. Actions that do not apply to
the current state (no session, wrong lifecycle state, out-of-range index,
unknown option) return the very same session object, so callers can detect a
no-op with an identity check.
"""

import logging
from dataclasses import dataclass, replace
from typing import Callable, Dict, Iterable, Optional, Type
from uuid import uuid4

from ..config.settings import QuizSettings
from ..models import QuestionAttempt, QuestionRecord, QuestionStatus, QuizSession, Selection, SessionState
from .actions import (
    Action,
    ClearAnswer,
    GoToQuestion,
    MarkForReview,
    NextQuestion,
    Pause,
    PreviousQuestion,
    Resume,
    SelectOption,
    SkipQuestion,
    Start,
    Submit,
    TimerTick,
    UnmarkQuestion,
)
from .navigation import NavigationView, derive_navigation
from .scoring import compute_score

_log = logging.getLogger(__name__)


def new_session(
    questions: Iterable[QuestionRecord],
    settings: Optional[QuizSettings] = None,
    *,
    subject: str = "general",
    total_time_limit: Optional[int] = None,
    session_id: Optional[str] = None,
) -> QuizSession:
    """Create a not-started session over `questions` (already prepared by the caller)."""
    if total_time_limit is not None and total_time_limit <= 0:
        raise ValueError("total_time_limit must be a positive number of seconds")
    return QuizSession(
        id=session_id or str(uuid4()),
        questions=tuple(questions),
        settings=settings or QuizSettings(),
        subject=subject or "general",
        total_time_limit=total_time_limit,
    )


def _ignored(session: QuizSession, action: Action, reason: str) -> QuizSession:
    _log.debug("Ignoring %s on session %s: %s", type(action).__name__, session.id, reason)
    return session


def _require_active(session: QuizSession, action: Action) -> bool:
    if session.state is not SessionState.ACTIVE:
        _ignored(session, action, f"session is {session.state.value}")
        return False
    return True


def _update_current(
    session: QuizSession,
    action: Action,
    update: Callable[[QuestionAttempt], QuestionAttempt],
) -> QuizSession:
    if not _require_active(session, action):
        return session
    attempt = session.current_attempt
    if attempt is None:
        return _ignored(session, action, "no attempts")
    updated = update(attempt)
    if updated is attempt:
        return session
    return session.with_attempt(session.current_question_index, updated)


# --- Lifecycle ---

def _start(session: QuizSession, action: Start) -> QuizSession:
    if session.state is not SessionState.NOT_STARTED:
        return _ignored(session, action, f"session is {session.state.value}")
    if not session.questions:
        return _ignored(session, action, "no questions")
    return replace(
        session,
        state=SessionState.ACTIVE,
        attempts=tuple(QuestionAttempt(question=q) for q in session.questions),
        current_question_index=0,
        started_at=action.at,
        time_elapsed=0.0,
    )


def _pause(session: QuizSession, action: Pause) -> QuizSession:
    if not _require_active(session, action):
        return session
    return replace(session, state=SessionState.PAUSED)


def _resume(session: QuizSession, action: Resume) -> QuizSession:
    if session.state is not SessionState.PAUSED:
        return _ignored(session, action, f"session is {session.state.value}")
    return replace(session, state=SessionState.ACTIVE)


def _submit(session: QuizSession, action: Submit) -> QuizSession:
    if not _require_active(session, action):
        return session
    score = compute_score(session, action.at)
    return replace(session, state=SessionState.FINISHED, finished_at=action.at, score=score)


def _tick(session: QuizSession, action: TimerTick) -> QuizSession:
    if not _require_active(session, action):
        return session
    elapsed = max(session.time_elapsed, float(action.elapsed))
    delta = max(0.0, float(action.delta))
    updated = replace(session, time_elapsed=elapsed)
    attempt = updated.current_attempt
    if attempt is not None and delta > 0:
        updated = updated.with_attempt(
            updated.current_question_index,
            replace(attempt, time_spent=attempt.time_spent + delta),
        )
    return updated


# --- Current question ---

def _select(session: QuizSession, action: SelectOption) -> QuizSession:
    def update(attempt: QuestionAttempt) -> QuestionAttempt:
        if not attempt.question.has_option(action.option_id):
            _ignored(session, action, f"unknown option {action.option_id!r}")
            return attempt
        if attempt.status is QuestionStatus.MARKED:
            status = QuestionStatus.ANSWERED_MARKED
        else:
            status = QuestionStatus.ANSWERED
        return replace(
            attempt,
            status=status,
            selection=Selection(option_id=action.option_id, answered_at=action.at),
            attempts_count=attempt.attempts_count + 1,
        )

    return _update_current(session, action, update)


def _mark(session: QuizSession, action: MarkForReview) -> QuizSession:
    def update(attempt: QuestionAttempt) -> QuestionAttempt:
        if attempt.status is QuestionStatus.ANSWERED:
            status = QuestionStatus.ANSWERED_MARKED
        else:
            status = QuestionStatus.MARKED
        return replace(attempt, status=status, marked_at=action.at)

    return _update_current(session, action, update)


def _unmark(session: QuizSession, action: UnmarkQuestion) -> QuizSession:
    def update(attempt: QuestionAttempt) -> QuestionAttempt:
        if attempt.status is QuestionStatus.ANSWERED_MARKED or attempt.selection is not None:
            status = QuestionStatus.ANSWERED
        else:
            status = QuestionStatus.NOT_ANSWERED
        return replace(attempt, status=status, marked_at=None)

    return _update_current(session, action, update)


def _skip(session: QuizSession, action: SkipQuestion) -> QuizSession:
    return _update_current(session, action, lambda a: replace(a, status=QuestionStatus.SKIPPED))


def _clear(session: QuizSession, action: ClearAnswer) -> QuizSession:
    def update(attempt: QuestionAttempt) -> QuestionAttempt:
        if attempt.status is QuestionStatus.ANSWERED_MARKED:
            status = QuestionStatus.MARKED
        else:
            status = QuestionStatus.NOT_ANSWERED
        return replace(attempt, status=status, selection=None)

    return _update_current(session, action, update)


# --- Navigation ---

def _go_to(session: QuizSession, action: Action, index: int) -> QuizSession:
    if not _require_active(session, action):
        return session
    if not 0 <= index < len(session.attempts):
        return _ignored(session, action, f"index {index} out of range")
    if index == session.current_question_index:
        return session
    return replace(session, current_question_index=index)


def _next(session: QuizSession, action: NextQuestion) -> QuizSession:
    return _go_to(session, action, session.current_question_index + 1)


def _previous(session: QuizSession, action: PreviousQuestion) -> QuizSession:
    return _go_to(session, action, session.current_question_index - 1)


def _go_to_question(session: QuizSession, action: GoToQuestion) -> QuizSession:
    return _go_to(session, action, int(action.index))


_HANDLERS: Dict[Type, Callable[[QuizSession, Action], QuizSession]] = {
    Start: _start,
    SelectOption: _select,
    MarkForReview: _mark,
    UnmarkQuestion: _unmark,
    SkipQuestion: _skip,
    ClearAnswer: _clear,
    NextQuestion: _next,
    PreviousQuestion: _previous,
    GoToQuestion: _go_to_question,
    Pause: _pause,
    Resume: _resume,
    Submit: _submit,
    TimerTick: _tick,
}


def transition(session: Optional[QuizSession], action: Action) -> Optional[QuizSession]:
    """Apply one action and return the next session snapshot."""
    if session is None:
        _log.debug("Ignoring %s: no session", type(action).__name__)
        return None
    handler = _HANDLERS.get(type(action))
    if handler is None:
        _log.warning("Ignoring unknown action %r", action)
        return session
    return handler(session, action)


@dataclass(frozen=True)
class StoreSnapshot:
    session: Optional[QuizSession]
    navigation: NavigationView


class SessionStore:
    """Holds the current session and applies one action at a time."""

    def __init__(self, session: Optional[QuizSession] = None) -> None:
        self._session = session
        self._navigation = derive_navigation(session)

    @property
    def session(self) -> Optional[QuizSession]:
        return self._session

    @property
    def navigation(self) -> NavigationView:
        return self._navigation

    def snapshot(self) -> StoreSnapshot:
        return StoreSnapshot(session=self._session, navigation=self._navigation)

    def load(self, session: Optional[QuizSession]) -> StoreSnapshot:
        self._session = session
        self._navigation = derive_navigation(session)
        return self.snapshot()

    def dispatch(self, action: Action) -> StoreSnapshot:
        nxt = transition(self._session, action)
        if nxt is not self._session:
            self._session = nxt
            self._navigation = derive_navigation(nxt)
        return self.snapshot()
