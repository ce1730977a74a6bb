from __future__ import annotations

"""Matplotlib plots for score trends and per-topic accuracy."""

from typing import Optional
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt


def plot_trend(
    df: pd.DataFrame,
    *,
    value_col: str = "percentage",
    last: Optional[int] = None,
    title: Optional[str] = None,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> None:
    if df.empty:
        return
    g = df.sort_values("attempt_idx")
    if last is not None:
        g = g.tail(int(last))
    plt.figure()
    x = g["attempt_idx"].to_numpy(dtype=int)
    plt.plot(x, g[value_col].to_numpy(dtype=float), marker="o", linestyle="", label=value_col)
    smooth_col = f"{value_col}_smooth"
    if smooth_col in g.columns:
        plt.plot(x, g[smooth_col].to_numpy(dtype=float), linewidth=2, label=f"{value_col} (EWMA)")
    plt.xlabel("Attempt")
    plt.ylabel(value_col)
    plt.ylim(0, 100)
    plt.title(f"Trend: {title}" if title else "Trend")
    plt.legend()
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()


def plot_topics(
    stats: pd.DataFrame,
    *,
    weak_threshold: Optional[float] = None,
    strong_threshold: Optional[float] = None,
    save_path: Optional[str | bytes | "os.PathLike[str]"] = None,
) -> None:
    if stats.empty:
        return
    labels = stats["topic"].astype(str).tolist()
    vals = stats["percentage"].to_numpy(dtype=float)
    ypos = np.arange(len(labels))
    plt.figure(figsize=(6, max(2.0, 0.4 * len(labels) + 1)))
    plt.barh(ypos, vals)
    plt.yticks(ypos, labels=labels)
    if weak_threshold is not None:
        plt.axvline(weak_threshold, linestyle="--", linewidth=1, color="tab:red")
    if strong_threshold is not None:
        plt.axvline(strong_threshold, linestyle="--", linewidth=1, color="tab:green")
    plt.xlim(0, 100)
    plt.xlabel("Accuracy (%)")
    plt.title("Topic accuracy")
    if save_path:
        plt.savefig(save_path, bbox_inches="tight", dpi=150)
    plt.close()
