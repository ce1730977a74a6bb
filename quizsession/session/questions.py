from __future__ import annotations

"""Caller-side question preparation: parsing, shuffling and capping."""

import random
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterable, List, Optional

import yaml

from ..config.settings import QuizSettings
from ..errors import QuestionFormatError
from ..models import QuestionRecord


def parse_questions(items: Iterable[Any]) -> List[QuestionRecord]:
    questions = [item if isinstance(item, QuestionRecord) else QuestionRecord.from_json(item) for item in items]
    seen = set()
    for q in questions:
        if q.id in seen:
            raise QuestionFormatError(f"Duplicate question id {q.id!r}")
        seen.add(q.id)
    return questions


def load_questions(path: str | Path) -> List[QuestionRecord]:
    """Load a question list from a YAML or JSON file.

    The document is either a list of questions or a mapping with a
    ``questions`` (or ``quiz``) list.
    """
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise QuestionFormatError(f"Question file not found: {p}") from None
    except yaml.YAMLError as exc:
        raise QuestionFormatError(f"Could not parse {p}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("questions", data.get("quiz"))
    if not isinstance(data, list):
        raise QuestionFormatError(f"{p} does not contain a list of questions")
    return parse_questions(data)


def shuffle_options(question: QuestionRecord, rng: random.Random) -> QuestionRecord:
    options = list(question.options)
    rng.shuffle(options)
    return replace(question, options=tuple(options))


def prepare_questions(
    bank: Iterable[QuestionRecord],
    settings: QuizSettings,
    rng: Optional[random.Random] = None,
) -> List[QuestionRecord]:
    """Apply shuffle_questions, questions_per_session and shuffle_options.

    Option ids are untouched, so the correct-option reference survives
    shuffling.
    """
    rng = rng or random.Random()
    questions = list(bank)
    if settings.shuffle_questions:
        rng.shuffle(questions)
    questions = questions[: settings.questions_per_session]
    if settings.shuffle_options:
        questions = [shuffle_options(q, rng) for q in questions]
    return questions
