"""Scheduling: trigger evaluation, the per-message orchestrator and timeline loading."""

from .hydration import load_timeline, new_timeline, timeline_from_remote
from .orchestrator import ProcessResult, TimelineOrchestrator
from .triggers import (
    TimelineProgress,
    calculate_progress,
    consolidation_due,
    reminder_due,
    summary_due,
)

__all__ = [
    "ProcessResult",
    "TimelineOrchestrator",
    "TimelineProgress",
    "calculate_progress",
    "consolidation_due",
    "load_timeline",
    "new_timeline",
    "reminder_due",
    "summary_due",
    "timeline_from_remote",
]
