"""quizsession package initialization.

Exposes the engine façade and the domain models so hosting code can simply
`from quizsession import QuizEngine, QuestionRecord`.
"""

from __future__ import annotations

__version__ = "0.1.0"

from .config.settings import QuizSettings
from .models import (
    AnswerOption,
    QuestionAttempt,
    QuestionBreakdown,
    QuestionRecord,
    QuestionStatus,
    QuizScore,
    QuizSession,
    Selection,
    SessionState,
)
from .app.engine import QuizEngine

__all__ = [
    "__version__",
    "QuizSettings",
    "AnswerOption",
    "QuestionAttempt",
    "QuestionBreakdown",
    "QuestionRecord",
    "QuestionStatus",
    "QuizScore",
    "QuizSession",
    "Selection",
    "SessionState",
    "QuizEngine",
]
