from __future__ import annotations

"""TimerDriver: cancellable one-second ticker for an active session.

Each start/stop bumps a generation counter. A scheduled callback carries the
generation it was armed with and is dropped if the driver has moved on, so a
tick can never land on a paused, finished or disposed session.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from ..models import QuizSession, SessionState

TickHandler = Callable[[float, int], None]


class TimerDriver:
    def __init__(
        self,
        on_tick: TickHandler,
        tick_seconds: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._on_tick = on_tick
        self.tick_seconds = float(tick_seconds)
        self._clock = clock
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()
        self._generation = 0
        self._running = False
        self._last_tick: Optional[float] = None

    @property
    def generation(self) -> int:
        return self._generation

    def is_running(self) -> bool:
        return self._running

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return self._running and generation == self._generation

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._generation += 1
            self._running = True
            self._last_tick = self._clock()
            self._arm(self._generation)

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            self._running = False
            self._last_tick = None
            if self._timer:
                self._timer.cancel()
                self._timer = None

    def tick(self) -> float:
        """Advance once from the caller's thread. Returns the delta delivered."""
        with self._lock:
            if not self._running:
                return 0.0
            generation = self._generation
            delta = self._consume()
        self._on_tick(delta, generation)
        return delta

    def _consume(self) -> float:
        now = self._clock()
        delta = 0.0 if self._last_tick is None else max(0.0, now - self._last_tick)
        self._last_tick = now
        return delta

    def _arm(self, generation: int) -> None:
        # tick_seconds <= 0: driven manually through tick()
        if self.tick_seconds <= 0:
            return
        self._timer = threading.Timer(self.tick_seconds, self._on_timer, args=(generation,))
        self._timer.daemon = True
        self._timer.start()

    def _on_timer(self, generation: int) -> None:
        with self._lock:
            if not self._running or generation != self._generation:
                return
            delta = self._consume()
            self._arm(generation)
        # Deliver outside the lock; the receiver re-checks is_current().
        self._on_tick(delta, generation)


@dataclass(frozen=True)
class TimerView:
    is_running: bool
    is_paused: bool
    time_elapsed: float
    time_remaining: Optional[float]
    warning_threshold: int = 300
    critical_threshold: int = 60

    @property
    def level(self) -> str:
        if self.time_remaining is None:
            return "normal"
        if self.time_remaining <= self.critical_threshold:
            return "critical"
        if self.time_remaining <= self.warning_threshold:
            return "warning"
        return "normal"

    @property
    def expired(self) -> bool:
        return self.time_remaining is not None and self.time_remaining <= 0


def derive_timer(
    session: Optional[QuizSession],
    *,
    running: bool,
    warning_threshold: int = 300,
    critical_threshold: int = 60,
) -> TimerView:
    if session is None:
        return TimerView(False, False, 0.0, None, warning_threshold, critical_threshold)
    return TimerView(
        is_running=running and session.state is SessionState.ACTIVE,
        is_paused=session.state is SessionState.PAUSED,
        time_elapsed=session.time_elapsed,
        time_remaining=session.time_remaining,
        warning_threshold=warning_threshold,
        critical_threshold=critical_threshold,
    )
