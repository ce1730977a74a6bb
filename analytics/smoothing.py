from __future__ import annotations

"""Smoothing utilities (EWMA over attempts)."""

import pandas as pd


def ewma_percentage(df: pd.DataFrame, span: int = 5, value_col: str = "percentage") -> pd.DataFrame:
    """Return a copy sorted by attempt_idx with a new column f"{value_col}_smooth"."""
    g = df.sort_values("attempt_idx").copy()
    g[f"{value_col}_smooth"] = g[value_col].astype("float64").ewm(span=span).mean()
    return g
