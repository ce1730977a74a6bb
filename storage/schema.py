from __future__ import annotations

"""Schema constants and Pydantic models for the per-subject quiz history."""

from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel

# --- Constants ---

SCHEMA_VERSION = 1
DEFAULT_CAP = 50
FILE_PREFIX = "quiz-analytics-"
DEFAULT_TOPIC = "General"


# --- Pydantic models ---

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ScoreSummary(_CamelModel):
    obtained: int = Field(ge=0)
    total: int = Field(ge=0)
    percentage: float = Field(ge=0, le=100)

    @field_validator("total")
    def _obtained_le_total(cls, v: int, info: ValidationInfo) -> int:
        obtained = info.data.get("obtained")
        if obtained is not None and obtained > v:
            raise ValueError("obtained must be <= total")
        return v


class QuestionOutcome(_CamelModel):
    question_id: str
    topic: str = DEFAULT_TOPIC
    is_correct: bool
    time_spent: float = Field(default=0.0, ge=0)


class HistoryEntry(_CamelModel):
    id: str = Field(min_length=1)
    subject_id: str = Field(min_length=1)
    subject_name: str = ""
    score: ScoreSummary
    questions: List[QuestionOutcome] = Field(default_factory=list)
    completed_at: datetime

    @field_validator("completed_at")
    def _ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    @property
    def time_spent(self) -> float:
        return float(sum(q.time_spent for q in self.questions))


class HistoryAggregate(_CamelModel):
    total_attempts: int = 0
    average_score: float = 0.0
    best_score: float = 0.0
    total_time_spent: float = 0.0
    improvement_rate: float = 0.0


class HistoryLog(_CamelModel):
    """A subject's capped log, oldest entry first, with its derived aggregate."""

    subject: str
    entries: List[HistoryEntry] = Field(default_factory=list)
    aggregate: HistoryAggregate = Field(default_factory=HistoryAggregate)
