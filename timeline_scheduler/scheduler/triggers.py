"""Trigger evaluation for summaries, consolidation and reminders.

Scheduling is driven by message indices supplied on every call, not by
wall-clock time; there is no background timer.
"""

import math

from pydantic import BaseModel

from ..core.domain.timeline import ConversationTimeline


def summary_due(current_index: int, last_summary_index: int, summary_interval: int) -> bool:
    """True once ``summary_interval`` turns have passed since the last summary.

    With ``last_summary_index == -1`` the first summary fires at
    ``current_index >= summary_interval - 1``.
    """
    return current_index - last_summary_index >= summary_interval


def consolidation_due(current_index: int, consolidation_interval: int) -> bool:
    """True on every positive multiple of ``consolidation_interval``."""
    return current_index > 0 and current_index % consolidation_interval == 0


def reminder_due(
    current_index: int,
    last_triggered_at: int | None,
    reminder_interval: int,
) -> bool:
    """True on first fire or once ``reminder_interval`` turns have passed.

    Args:
        current_index: Index of the newest message
        last_triggered_at: Index of the active reminder's last trigger, or
            None when no active reminder exists
        reminder_interval: Turns between reminders
    """
    if last_triggered_at is None:
        return True
    return current_index - last_triggered_at >= reminder_interval


class TimelineProgress(BaseModel):
    """Where a conversation stands relative to its next triggers."""

    total_summaries: int
    total_reminders: int
    next_summary_at: int
    next_reminder_at: int
    progress_percentage: float


def calculate_progress(
    timeline: ConversationTimeline,
    current_message_count: int,
) -> TimelineProgress:
    """Report counts and the indices at which the next triggers are expected."""
    settings = timeline.settings
    reminder_interval = settings.reminder_interval

    next_summary_at = timeline.last_summary_index + settings.summary_interval + 1
    next_reminder_at = math.ceil(current_message_count / reminder_interval) * reminder_interval

    # Progress is measured against a nominal 100-turn conversation
    progress_percentage = min(current_message_count / 100 * 100, 100.0)

    return TimelineProgress(
        total_summaries=len(timeline.summaries),
        total_reminders=len(timeline.reminders),
        next_summary_at=next_summary_at,
        next_reminder_at=next_reminder_at,
        progress_percentage=progress_percentage,
    )
