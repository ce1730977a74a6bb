from __future__ import annotations

"""Quiz settings model using Pydantic."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QuizSettings(BaseModel):
    """Per-session quiz settings.

    - shuffle_questions / shuffle_options: applied before the session starts
    - show_explanations: expose explanation text in the score breakdown
    - allow_review / allow_skip / allow_mark_for_review: UI gates only
    - negative_marking / negative_mark_value: penalty per wrong answer
    - passing_percentage: threshold for `passed`
    - questions_per_session: cap applied when drawing from a larger bank
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    shuffle_questions: bool = False
    shuffle_options: bool = True
    show_explanations: bool = True
    allow_review: bool = True
    allow_skip: bool = True
    allow_mark_for_review: bool = True
    negative_marking: bool = False
    negative_mark_value: float = Field(-0.25, le=0)
    passing_percentage: float = Field(60.0, ge=0, le=100)
    questions_per_session: int = Field(10, ge=1)

