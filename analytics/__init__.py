from .config import AnalyticsConfig
from .metrics import compute_aggregate, improvement_rate, topic_stats, strong_topics, weak_topics
from .prepare import entries_frame, questions_frame
from .smoothing import ewma_percentage

__all__ = [
    "AnalyticsConfig",
    "compute_aggregate",
    "improvement_rate",
    "topic_stats",
    "strong_topics",
    "weak_topics",
    "entries_frame",
    "questions_frame",
    "ewma_percentage",
]
