from __future__ import annotations

"""Exception hierarchy for quizsession."""


class QuizSessionError(Exception):
    """Base class for errors raised by quizsession."""


class ConfigError(QuizSessionError):
    """Raised when a configuration file cannot be loaded or is invalid."""


class QuestionFormatError(QuizSessionError):
    """Raised when a question record cannot be parsed."""


class HistoryStoreError(QuizSessionError):
    """Raised when the history store cannot be written or cleared."""
