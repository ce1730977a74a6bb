from __future__ import annotations

"""Actions accepted by the session store.

Timestamps travel on the action so that `transition` stays a pure function.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Union


@dataclass(frozen=True)
class Start:
    at: datetime


@dataclass(frozen=True)
class SelectOption:
    option_id: str
    at: datetime


@dataclass(frozen=True)
class MarkForReview:
    at: datetime


@dataclass(frozen=True)
class UnmarkQuestion:
    pass


@dataclass(frozen=True)
class SkipQuestion:
    pass


@dataclass(frozen=True)
class ClearAnswer:
    pass


@dataclass(frozen=True)
class NextQuestion:
    pass


@dataclass(frozen=True)
class PreviousQuestion:
    pass


@dataclass(frozen=True)
class GoToQuestion:
    index: int


@dataclass(frozen=True)
class Pause:
    pass


@dataclass(frozen=True)
class Resume:
    pass


@dataclass(frozen=True)
class Submit:
    at: datetime


@dataclass(frozen=True)
class TimerTick:
    elapsed: float
    delta: float = 0.0


Action = Union[
    Start,
    SelectOption,
    MarkForReview,
    UnmarkQuestion,
    SkipQuestion,
    ClearAnswer,
    NextQuestion,
    PreviousQuestion,
    GoToQuestion,
    Pause,
    Resume,
    Submit,
    TimerTick,
]
