"""Conversation timeline scheduler.

Decides, turn by turn, when a conversation needs a new summary, when raw
summaries should be consolidated, and when a progress reminder is due,
within the limits of the caller's tier.
"""

from .core.domain import (
    ChatMessage,
    Conversation,
    ConversationTimeline,
    Reminder,
    Summary,
    SummaryFormat,
    Tier,
    TimelineSettings,
    TimelineSettingsRequest,
)
from .scheduler import ProcessResult, TimelineOrchestrator

__all__ = [
    "ChatMessage",
    "Conversation",
    "ConversationTimeline",
    "ProcessResult",
    "Reminder",
    "Summary",
    "SummaryFormat",
    "Tier",
    "TimelineOrchestrator",
    "TimelineSettings",
    "TimelineSettingsRequest",
]

__version__ = "0.1.0"
