from .schema import (
    SCHEMA_VERSION,
    DEFAULT_CAP,
    FILE_PREFIX,
    DEFAULT_TOPIC,
    ScoreSummary,
    QuestionOutcome,
    HistoryEntry,
    HistoryAggregate,
    HistoryLog,
)

__all__ = [
    "SCHEMA_VERSION",
    "DEFAULT_CAP",
    "FILE_PREFIX",
    "DEFAULT_TOPIC",
    "ScoreSummary",
    "QuestionOutcome",
    "HistoryEntry",
    "HistoryAggregate",
    "HistoryLog",
]
