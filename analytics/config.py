from __future__ import annotations

"""Analytics configuration (thresholds and smoothing) using Pydantic."""

from pydantic import BaseModel, Field


class AnalyticsConfig(BaseModel):
    """Hyperparameters for history analytics.

    - weak_threshold: topics below this percentage are weak
    - strong_threshold: topics at or above this percentage are strong
    - max_topics: cap on strong/weak topic lists
    - smoothing_span: EWMA span in attempts (>1)
    - trend_window: number of most recent attempts shown in trend reports
    """

    weak_threshold: float = Field(60.0, ge=0, le=100)
    strong_threshold: float = Field(80.0, ge=0, le=100)
    max_topics: int = Field(5, ge=1)
    smoothing_span: int = Field(5, gt=1)
    trend_window: int = Field(10, ge=1)
