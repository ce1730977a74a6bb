from __future__ import annotations

"""Metric computations over a subject's history log."""

from typing import List, Optional, Sequence

import pandas as pd

from storage.schema import HistoryAggregate, HistoryEntry
from .config import AnalyticsConfig
from .prepare import entries_frame, questions_frame

MIN_ATTEMPTS_FOR_IMPROVEMENT = 4


def improvement_rate(percentages: pd.Series) -> float:
    """Relative change between the later and earlier half of the attempts.

    The first half is the first n // 2 attempts. Returns 0 with fewer than
    four attempts, or when the first-half average is 0 (undefined change).
    """
    n = len(percentages)
    if n < MIN_ATTEMPTS_FOR_IMPROVEMENT:
        return 0.0
    half = n // 2
    first = float(percentages.iloc[:half].mean())
    second = float(percentages.iloc[half:].mean())
    if first == 0:
        return 0.0
    return (second - first) / first * 100


def compute_aggregate(entries: Sequence[HistoryEntry]) -> HistoryAggregate:
    """Aggregate statistics over the whole log (not just the newest entry)."""
    df = entries_frame(entries)
    if df.empty:
        return HistoryAggregate()
    pct = df["percentage"].astype("float64")
    return HistoryAggregate(
        total_attempts=len(df),
        average_score=float(pct.mean()),
        best_score=float(pct.max()),
        total_time_spent=float(df["time_spent"].sum()),
        improvement_rate=improvement_rate(pct),
    )


def topic_stats(entries: Sequence[HistoryEntry]) -> pd.DataFrame:
    """Per-topic totals and accuracy, weakest first.

    Columns: topic, total, correct, percentage.
    """
    qf = questions_frame(entries)
    if qf.empty:
        return pd.DataFrame(
            {
                "topic": pd.Series(dtype="string"),
                "total": pd.Series(dtype="int64"),
                "correct": pd.Series(dtype="int64"),
                "percentage": pd.Series(dtype="float64"),
            }
        )
    g = qf.groupby("topic").agg(total=("is_correct", "size"), correct=("is_correct", "sum")).reset_index()
    g["total"] = g["total"].astype("int64")
    g["correct"] = g["correct"].astype("int64")
    g["percentage"] = (g["correct"] / g["total"] * 100).astype("float64")
    return g.sort_values(["percentage", "topic"], kind="stable").reset_index(drop=True)


def weak_topics(stats: pd.DataFrame, cfg: Optional[AnalyticsConfig] = None) -> List[str]:
    cfg = cfg or AnalyticsConfig()
    weak = stats[stats["percentage"] < cfg.weak_threshold]
    return [str(t) for t in weak["topic"].head(cfg.max_topics)]


def strong_topics(stats: pd.DataFrame, cfg: Optional[AnalyticsConfig] = None) -> List[str]:
    cfg = cfg or AnalyticsConfig()
    strong = stats[stats["percentage"] >= cfg.strong_threshold]
    strong = strong.sort_values(["percentage", "topic"], ascending=[False, True], kind="stable")
    return [str(t) for t in strong["topic"].head(cfg.max_topics)]
