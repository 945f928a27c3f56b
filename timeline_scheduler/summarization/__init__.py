"""Summary generation: the local fallback summarizer and the consolidator."""

from .consolidator import consolidate, mark_absorbed
from .local import TOPIC_KEYWORDS, LocalSummarizer

__all__ = [
    "LocalSummarizer",
    "TOPIC_KEYWORDS",
    "consolidate",
    "mark_absorbed",
]
