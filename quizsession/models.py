from __future__ import annotations

"""Domain models for one quiz attempt: questions, per-question attempts, scores."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .config.settings import QuizSettings
from .errors import QuestionFormatError


class QuestionStatus(str, Enum):
    NOT_ANSWERED = "not-answered"
    ANSWERED = "answered"
    MARKED = "marked"
    ANSWERED_MARKED = "answered-marked"
    SKIPPED = "skipped"

    @property
    def is_marked(self) -> bool:
        return self in (QuestionStatus.MARKED, QuestionStatus.ANSWERED_MARKED)

    @property
    def is_answered(self) -> bool:
        return self in (QuestionStatus.ANSWERED, QuestionStatus.ANSWERED_MARKED)


class SessionState(str, Enum):
    NOT_STARTED = "not-started"
    ACTIVE = "active"
    PAUSED = "paused"
    FINISHED = "finished"


DIFFICULTIES = {"easy", "medium", "hard", "expert"}


@dataclass(frozen=True)
class AnswerOption:
    id: str
    text: str

    def to_json(self) -> Dict[str, Any]:
        return {"id": self.id, "text": self.text}


@dataclass(frozen=True)
class QuestionRecord:
    """A multiple-choice question as supplied by the question bank."""

    id: str
    prompt: str
    options: Tuple[AnswerOption, ...]
    correct_option_id: str
    explanation: Optional[str] = None
    difficulty: Optional[str] = None
    tags: Tuple[str, ...] = ()
    topic: Optional[str] = None
    time_limit: Optional[int] = None
    points: Optional[float] = None
    hint: Optional[str] = None

    def has_option(self, option_id: str) -> bool:
        return any(opt.id == option_id for opt in self.options)

    def option(self, option_id: Optional[str]) -> Optional[AnswerOption]:
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    @property
    def topic_label(self) -> str:
        if self.topic:
            return self.topic
        if self.tags:
            return self.tags[0]
        return "General"

    def to_json(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "prompt": self.prompt,
            "options": [opt.to_json() for opt in self.options],
            "correctOptionId": self.correct_option_id,
        }
        if self.explanation is not None:
            data["explanation"] = self.explanation
        meta: Dict[str, Any] = {}
        if self.difficulty is not None:
            meta["difficulty"] = self.difficulty
        if self.tags:
            meta["tags"] = list(self.tags)
        if self.topic is not None:
            meta["topic"] = self.topic
        if self.time_limit is not None:
            meta["timeLimit"] = self.time_limit
        if self.points is not None:
            meta["points"] = self.points
        if self.hint is not None:
            meta["hint"] = self.hint
        if meta:
            data["meta"] = meta
        return data

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> "QuestionRecord":
        """Build a record from a question-bank dict.

        Accepts the canonical shape (``options: [{id, text}]`` plus
        ``correctOptionId``) and the bank shape (``options: [str]`` plus
        ``answerIndex``/``reason``). Plain string options get their original
        position as a stable id, so shuffling never changes the correct id.
        """
        if not isinstance(data, dict):
            raise QuestionFormatError(f"Question must be a mapping, got {type(data).__name__}")
        qid = data.get("id")
        if qid is None or str(qid).strip() == "":
            raise QuestionFormatError("Question id missing")
        qid = str(qid)
        prompt = data.get("prompt", data.get("question"))
        if not isinstance(prompt, str) or not prompt.strip():
            raise QuestionFormatError(f"Question {qid}: prompt missing")

        raw_options = data.get("options")
        if not isinstance(raw_options, list) or not raw_options:
            raise QuestionFormatError(f"Question {qid}: options must be a non-empty list")
        options: List[AnswerOption] = []
        for idx, item in enumerate(raw_options):
            if isinstance(item, dict):
                options.append(AnswerOption(id=str(item.get("id", idx)), text=str(item.get("text", ""))))
            else:
                options.append(AnswerOption(id=str(idx), text=str(item)))
        ids = [opt.id for opt in options]
        if len(set(ids)) != len(ids):
            raise QuestionFormatError(f"Question {qid}: duplicate option ids")

        correct = data.get("correctOptionId", data.get("correct_option_id"))
        if correct is None:
            answer_index = data.get("answerIndex", data.get("answer_index"))
            try:
                answer_index = int(answer_index)
            except (TypeError, ValueError):
                raise QuestionFormatError(f"Question {qid}: correct option missing") from None
            if not 0 <= answer_index < len(options):
                raise QuestionFormatError(f"Question {qid}: answerIndex {answer_index} out of range")
            correct = options[answer_index].id
        correct = str(correct)
        if correct not in ids:
            raise QuestionFormatError(f"Question {qid}: correct option {correct!r} is not one of the options")

        meta = data.get("meta") or {}
        if not isinstance(meta, dict):
            meta = {}

        def pick(*names: str) -> Any:
            for name in names:
                if data.get(name) is not None:
                    return data[name]
                if meta.get(name) is not None:
                    return meta[name]
            return None

        difficulty = pick("difficulty")
        if difficulty is not None and str(difficulty) not in DIFFICULTIES:
            difficulty = None
        tags = pick("tags") or ()
        if isinstance(tags, str):
            tags = (tags,)
        time_limit = pick("timeLimit", "time_limit")
        points = pick("points")
        try:
            time_limit = int(time_limit) if time_limit is not None else None
            points = float(points) if points is not None else None
        except (TypeError, ValueError):
            raise QuestionFormatError(f"Question {qid}: invalid numeric metadata") from None
        explanation = pick("explanation", "reason")
        topic = pick("topic")
        hint = pick("hint")

        return cls(
            id=qid,
            prompt=prompt.strip(),
            options=tuple(options),
            correct_option_id=correct,
            explanation=str(explanation) if explanation is not None else None,
            difficulty=str(difficulty) if difficulty is not None else None,
            tags=tuple(str(t) for t in tags),
            topic=str(topic) if topic is not None else None,
            time_limit=time_limit,
            points=points,
            hint=str(hint) if hint is not None else None,
        )


@dataclass(frozen=True)
class Selection:
    option_id: str
    answered_at: datetime


@dataclass(frozen=True)
class QuestionAttempt:
    """Interaction state of one question within a session."""

    question: QuestionRecord
    status: QuestionStatus = QuestionStatus.NOT_ANSWERED
    selection: Optional[Selection] = None
    time_spent: float = 0.0
    attempts_count: int = 0
    marked_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if self.status.is_answered and self.selection is None:
            raise ValueError(f"Status {self.status.value!r} requires a selected option")
        if self.time_spent < 0:
            raise ValueError("time_spent must be >= 0")

    @property
    def selected_option_id(self) -> Optional[str]:
        return self.selection.option_id if self.selection else None

    @property
    def answered_at(self) -> Optional[datetime]:
        return self.selection.answered_at if self.selection else None

    @property
    def is_correct(self) -> bool:
        """False for skipped attempts even when a selection is kept."""
        if self.selection is None or self.status is QuestionStatus.SKIPPED:
            return False
        return self.selection.option_id == self.question.correct_option_id


@dataclass(frozen=True)
class QuestionBreakdown:
    question_id: str
    question_text: str
    user_answer: Optional[str]
    correct_answer: str
    is_correct: bool
    time_spent: float
    status: QuestionStatus
    explanation: Optional[str] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "questionId": self.question_id,
            "questionText": self.question_text,
            "userAnswer": self.user_answer,
            "correctAnswer": self.correct_answer,
            "isCorrect": self.is_correct,
            "timeSpent": self.time_spent,
            "status": self.status.value,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class QuizScore:
    total: int
    correct: int
    incorrect: int
    unanswered: int
    skipped: int
    marked: int
    raw_score: float
    percentage: float
    passed: bool
    total_time_spent: int
    average_time_per_question: float
    breakdown: Tuple[QuestionBreakdown, ...] = ()

    def to_json(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "correct": self.correct,
            "incorrect": self.incorrect,
            "unanswered": self.unanswered,
            "skipped": self.skipped,
            "marked": self.marked,
            "rawScore": self.raw_score,
            "percentage": self.percentage,
            "passed": self.passed,
            "totalTimeSpent": self.total_time_spent,
            "averageTimePerQuestion": self.average_time_per_question,
            "breakdown": [b.to_json() for b in self.breakdown],
        }


@dataclass(frozen=True)
class QuizSession:
    """The session aggregate. Replaced, never mutated, by each transition."""

    id: str
    questions: Tuple[QuestionRecord, ...]
    settings: QuizSettings = field(default_factory=QuizSettings)
    subject: str = "general"
    state: SessionState = SessionState.NOT_STARTED
    attempts: Tuple[QuestionAttempt, ...] = ()
    current_question_index: int = 0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    total_time_limit: Optional[int] = None
    time_elapsed: float = 0.0
    score: Optional[QuizScore] = None

    def __post_init__(self) -> None:
        if (self.score is not None) != (self.state is SessionState.FINISHED):
            raise ValueError("score must be present exactly when the session is finished")
        if self.attempts and not 0 <= self.current_question_index < len(self.attempts):
            raise ValueError(f"current_question_index {self.current_question_index} out of range")

    @property
    def current_attempt(self) -> Optional[QuestionAttempt]:
        if not self.attempts:
            return None
        return self.attempts[self.current_question_index]

    @property
    def time_remaining(self) -> Optional[float]:
        if self.total_time_limit is None:
            return None
        return max(0.0, float(self.total_time_limit) - self.time_elapsed)

    @property
    def is_finished(self) -> bool:
        return self.state is SessionState.FINISHED

    def with_attempt(self, index: int, attempt: QuestionAttempt) -> "QuizSession":
        attempts = list(self.attempts)
        attempts[index] = attempt
        return replace(self, attempts=tuple(attempts))
