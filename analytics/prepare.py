from __future__ import annotations

"""Turn history entries into DataFrames with consistent dtypes."""

from typing import Sequence

import pandas as pd

from storage.schema import HistoryEntry

ENTRY_DTYPES = {
    "session_id": "string",
    "subject_id": "string",
    "completed_at": pd.DatetimeTZDtype(tz="UTC"),
    "obtained": "Int64",
    "total": "Int64",
    "percentage": "float64",
    "time_spent": "float64",
    "n_questions": "Int64",
}

QUESTION_DTYPES = {
    "session_id": "string",
    "attempt_idx": "int64",
    "question_id": "string",
    "topic": "string",
    "is_correct": "bool",
    "time_spent": "float64",
}


def _empty(dtypes: dict) -> pd.DataFrame:
    return pd.DataFrame({k: pd.Series(dtype=v) for k, v in dtypes.items()})


def entries_frame(entries: Sequence[HistoryEntry]) -> pd.DataFrame:
    """One row per attempt, in log order, with a stable 'attempt_idx'.

    Log order is insertion order (oldest first); it is kept as-is rather than
    re-sorted by completion time.
    """
    rows = [
        {
            "session_id": e.id,
            "subject_id": e.subject_id,
            "completed_at": e.completed_at,
            "obtained": e.score.obtained,
            "total": e.score.total,
            "percentage": e.score.percentage,
            "time_spent": e.time_spent,
            "n_questions": len(e.questions),
        }
        for e in entries
    ]
    df = pd.DataFrame(rows).astype(ENTRY_DTYPES) if rows else _empty(ENTRY_DTYPES)
    df["attempt_idx"] = pd.Series(range(len(df)), index=df.index, dtype="int64")
    return df


def questions_frame(entries: Sequence[HistoryEntry]) -> pd.DataFrame:
    """One row per answered question across all attempts."""
    rows = [
        {
            "session_id": e.id,
            "attempt_idx": idx,
            "question_id": q.question_id,
            "topic": q.topic,
            "is_correct": q.is_correct,
            "time_spent": q.time_spent,
        }
        for idx, e in enumerate(entries)
        for q in e.questions
    ]
    if not rows:
        return _empty(QUESTION_DTYPES)
    return pd.DataFrame(rows).astype(QUESTION_DTYPES)
