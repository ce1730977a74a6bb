from __future__ import annotations

"""Tiny pub/sub event bus used by the engine to notify a hosting UI."""

import logging
from typing import Any, Callable, Dict, List

_log = logging.getLogger(__name__)

SESSION_CHANGED = "session_changed"
TIMER_TICK = "timer_tick"
SESSION_FINISHED = "session_finished"
HISTORY_RECORDED = "history_recorded"


class EventBus:
    def __init__(self) -> None:
        self._subs: Dict[str, List[Callable[[Any], None]]] = {}

    def subscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        self._subs.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> None:
        handlers = self._subs.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str, payload: Any) -> None:
        for h in list(self._subs.get(event, [])):
            try:
                h(payload)
            except Exception:
                # A broken subscriber must not break the session
                _log.exception("Handler for %r failed", event)
