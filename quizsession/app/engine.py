from __future__ import annotations

"""QuizEngine: the façade a hosting UI drives.

Wires the session store, the timer driver, the scorer and the history
recorder. Every transition runs under one re-entrant lock because timer ticks
arrive on a `threading.Timer` thread.
"""

import logging
import threading
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional

from ..config.config import settings_from_config
from ..config.settings import QuizSettings
from ..models import QuestionRecord, QuizScore, QuizSession, SessionState
from ..results.recorder import HistoryRecorder
from ..session.actions import (
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
from ..session.navigation import NavigationView, SessionStats, derive_stats
from ..session.store import SessionStore, StoreSnapshot, new_session
from ..session.timer import TimerDriver, TimerView, derive_timer
from . import events as ev
from .explain import trace as xtrace
from storage.schema import HistoryLog

_log = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuizEngine:
    def __init__(
        self,
        settings: Optional[QuizSettings] = None,
        *,
        recorder: Optional[HistoryRecorder] = None,
        events: Optional[ev.EventBus] = None,
        tick_seconds: float = 1.0,
        warning_threshold: int = 300,
        critical_threshold: int = 60,
        clock: Callable[[], float] = time.monotonic,
        now: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings or QuizSettings()
        self.recorder = recorder
        self.events = events or ev.EventBus()
        self.warning_threshold = int(warning_threshold)
        self.critical_threshold = int(critical_threshold)
        self._now = now or _utcnow
        self._lock = threading.RLock()
        self._store = SessionStore()
        self._timer = TimerDriver(self._on_tick, tick_seconds=tick_seconds, clock=clock)
        self._last_history: Optional[HistoryLog] = None

    @classmethod
    def from_config(cls, cfg: Dict[str, Any], *, recorder: Optional[HistoryRecorder] = None, **kwargs: Any) -> "QuizEngine":
        """Build an engine from a validated config dict (see config.validate_config)."""
        timer_cfg = cfg.get("timer", {})
        return cls(
            settings_from_config(cfg),
            recorder=recorder,
            tick_seconds=float(timer_cfg.get("tick_seconds", 1.0)),
            warning_threshold=int(timer_cfg.get("warning_threshold", 300)),
            critical_threshold=int(timer_cfg.get("critical_threshold", 60)),
            **kwargs,
        )

    # ---- read side ----
    @property
    def session(self) -> Optional[QuizSession]:
        return self._store.session

    @property
    def navigation(self) -> NavigationView:
        return self._store.navigation

    def snapshot(self) -> StoreSnapshot:
        with self._lock:
            return self._store.snapshot()

    def timer_view(self) -> TimerView:
        with self._lock:
            return derive_timer(
                self._store.session,
                running=self._timer.is_running(),
                warning_threshold=self.warning_threshold,
                critical_threshold=self.critical_threshold,
            )

    def stats(self) -> SessionStats:
        return derive_stats(self._store.session)

    @property
    def last_history(self) -> Optional[HistoryLog]:
        return self._last_history

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self.events.subscribe(event, handler)

    # ---- lifecycle ----
    def start(
        self,
        questions: Iterable[QuestionRecord],
        *,
        subject: str = "general",
        total_time_limit: Optional[int] = None,
        session_id: Optional[str] = None,
    ) -> StoreSnapshot:
        """Create and start a new session, replacing (and stopping) any previous one."""
        with self._lock:
            self._timer.stop()
            self._last_history = None
            session = new_session(
                questions,
                self.settings,
                subject=subject,
                total_time_limit=total_time_limit,
                session_id=session_id,
            )
            self._store.load(session)
            snap = self._dispatch(Start(at=self._now()))
            current = snap.session
            if current is not None and current.state is SessionState.ACTIVE:
                self._timer.start()
                xtrace(
                    "session_started",
                    {
                        "session": current.id,
                        "subject": current.subject,
                        "questions": len(current.questions),
                        "time_limit": current.total_time_limit,
                    },
                )
            else:
                _log.warning("Session %s not started (no questions)", session.id)
            return snap

    def pause(self) -> StoreSnapshot:
        with self._lock:
            before = self._store.session
            snap = self._dispatch(Pause())
            if snap.session is not before:
                self._timer.stop()
                xtrace("session_paused", {"elapsed": round(snap.session.time_elapsed, 2)})
            return snap

    def resume(self) -> StoreSnapshot:
        with self._lock:
            before = self._store.session
            snap = self._dispatch(Resume())
            if snap.session is not before:
                self._timer.start()
                xtrace("session_resumed", {"elapsed": round(snap.session.time_elapsed, 2)})
            return snap

    def submit(self) -> Optional[QuizScore]:
        """Finish the session and return its score.

        Submitting an already finished session returns the existing score and
        records nothing.
        """
        with self._lock:
            session = self._store.session
            if session is None:
                return None
            if session.is_finished:
                return session.score
            snap = self._dispatch(Submit(at=self._now()))
            finished = snap.session
            if finished is session:
                return None
            self._finish(finished)
            return finished.score

    def close(self) -> None:
        with self._lock:
            self._timer.stop()

    def __enter__(self) -> "QuizEngine":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    # ---- current question ----
    def select_option(self, option_id: str) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(SelectOption(option_id=str(option_id), at=self._now()))

    def mark_for_review(self) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(MarkForReview(at=self._now()))

    def unmark_question(self) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(UnmarkQuestion())

    def skip_question(self, advance: bool = True) -> StoreSnapshot:
        with self._lock:
            before = self._store.session
            snap = self._dispatch(SkipQuestion())
            if advance and snap.session is not before:
                snap = self._dispatch(NextQuestion())
            return snap

    def clear_answer(self) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(ClearAnswer())

    # ---- navigation ----
    def next_question(self) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(NextQuestion())

    def previous_question(self) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(PreviousQuestion())

    def go_to_question(self, index: int) -> StoreSnapshot:
        with self._lock:
            return self._dispatch(GoToQuestion(index=int(index)))

    # ---- timer ----
    def tick(self) -> TimerView:
        """Advance the timer once from the caller's thread."""
        with self._lock:
            self._timer.tick()
            return self.timer_view()

    def _on_tick(self, delta: float, generation: int) -> None:
        with self._lock:
            if not self._timer.is_current(generation):
                return
            session = self._store.session
            if session is None or session.state is not SessionState.ACTIVE:
                return
            snap = self._dispatch(TimerTick(elapsed=session.time_elapsed + delta, delta=delta))
            view = self.timer_view()
            self.events.emit(ev.TIMER_TICK, view)
            if view.expired and snap.session is not None and snap.session.state is SessionState.ACTIVE:
                xtrace("timer_expired", {"session": snap.session.id, "elapsed": round(snap.session.time_elapsed, 2)})
                self.submit()

    # ---- internals ----
    def _dispatch(self, action: Action) -> StoreSnapshot:
        before = self._store.session
        snap = self._store.dispatch(action)
        if snap.session is not before:
            self.events.emit(ev.SESSION_CHANGED, snap)
        return snap

    def _finish(self, session: QuizSession) -> None:
        self._timer.stop()
        score = session.score
        xtrace(
            "session_submitted",
            {
                "session": session.id,
                "correct": score.correct,
                "total": score.total,
                "percentage": round(score.percentage, 2),
                "passed": score.passed,
            },
        )
        self.events.emit(ev.SESSION_FINISHED, score)
        if self.recorder is None:
            return
        log = self.recorder.record(session)
        if log is not None:
            self._last_history = log
            self.events.emit(ev.HISTORY_RECORDED, log)
