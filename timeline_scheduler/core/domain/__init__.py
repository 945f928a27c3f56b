"""Domain models for the timeline scheduler.

This module contains the data structures shared by the policy engine,
the summarizers and the orchestrator.
"""

# Conversation models - read-only input
from .conversation import (
    ChatMessage,
    Conversation,
    MessageSender,
)

# Tier models - closed tier set and ranking
from .tiers import (
    Tier,
    TierComparison,
    coerce_tier,
    compare_tiers,
    rank,
)

# Timeline models - summaries, reminders and settings
from .timeline import (
    ConversationTimeline,
    Reminder,
    ReminderType,
    Summary,
    SummaryFormat,
    SummarySource,
    TimelineSettings,
    TimelineSettingsRequest,
)

__all__ = [
    # Conversation models
    "ChatMessage",
    "Conversation",
    "MessageSender",

    # Tier models
    "Tier",
    "TierComparison",
    "coerce_tier",
    "compare_tiers",
    "rank",

    # Timeline models
    "ConversationTimeline",
    "Reminder",
    "ReminderType",
    "Summary",
    "SummaryFormat",
    "SummarySource",
    "TimelineSettings",
    "TimelineSettingsRequest",
]
