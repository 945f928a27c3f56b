"""Timeline models: summaries, reminders, settings and the per-conversation aggregate.

A ``ConversationTimeline`` is owned by the caller and mutated in place by the
orchestrator. Raw summaries cover contiguous, non-overlapping message ranges;
consolidated summaries fold several raw summaries into one.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, model_validator


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SummaryFormat(str, Enum):
    """Rendering formats for summaries."""

    PARAGRAPH = "paragraph"
    BULLET = "bullet"
    SENTENCES = "sentences"


class SummarySource(str, Enum):
    """Which path produced a summary's text."""

    REMOTE = "remote"
    LOCAL = "local"
    CONSOLIDATION = "consolidation"


class ReminderType(str, Enum):
    """Kinds of timeline reminders."""

    PROGRESS = "progress"
    SUMMARY = "summary"
    CHECK_IN = "check_in"
    CUSTOM = "custom"


class Summary(BaseModel):
    """Summary of an inclusive message-index range."""

    id: str = Field(
        default_factory=lambda: f"summary_{uuid.uuid4().hex}",
        description="Unique summary identifier",
    )
    start_index: int = Field(..., ge=0, description="First message index covered")
    end_index: int = Field(..., ge=0, description="Last message index covered (inclusive)")
    text: str = Field(..., description="Summary text")
    format: SummaryFormat = Field(default=SummaryFormat.BULLET)
    created_at: datetime = Field(default_factory=_utcnow)
    is_consolidated: bool = Field(
        default=False,
        description="True on consolidated summaries and on summaries absorbed by one",
    )
    consolidated_from_ids: list[str] = Field(
        default_factory=list,
        description="Ids of absorbed summaries; only set on consolidated summaries",
    )
    source: SummarySource = Field(default=SummarySource.LOCAL)

    @model_validator(mode="after")
    def _check_range(self) -> "Summary":
        if self.end_index < self.start_index:
            raise ValueError(
                f"end_index {self.end_index} precedes start_index {self.start_index}"
            )
        return self

    @property
    def turn_count(self) -> int:
        """Number of messages covered."""
        return self.end_index - self.start_index + 1

    @property
    def is_absorbed(self) -> bool:
        """True for a raw summary folded into a consolidated summary."""
        return self.is_consolidated and not self.consolidated_from_ids


class Reminder(BaseModel):
    """Progress reminder surfaced every ``trigger_interval`` turns."""

    id: str = Field(default_factory=lambda: f"reminder_{uuid.uuid4().hex}")
    content: str = Field(..., description="Text shown to the user")
    trigger_interval: int = Field(..., ge=1, description="Turns between triggers")
    last_triggered_at: int = Field(..., ge=0, description="Message index of the last trigger")
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=_utcnow)
    reminder_type: ReminderType = Field(default=ReminderType.PROGRESS)


class TimelineSettings(BaseModel):
    """Effective, tier-clamped timeline settings. Every field is concrete."""

    summary_interval: int = Field(..., ge=1)
    reminder_interval: int = Field(..., ge=1)
    consolidation_interval: int = Field(..., ge=1)
    summary_format: SummaryFormat
    enable_timeline_reminder: bool
    enable_conversation_summary: bool
    auto_consolidate: bool = True


class TimelineSettingsRequest(BaseModel):
    """User-requested settings; unset fields fall back to defaults when clamped."""

    summary_interval: int | None = None
    reminder_interval: int | None = None
    consolidation_interval: int | None = None
    summary_format: SummaryFormat | None = None
    enable_timeline_reminder: bool | None = None
    enable_conversation_summary: bool | None = None
    auto_consolidate: bool | None = None


class ConversationTimeline(BaseModel):
    """Summaries, reminders and scheduling state of one conversation."""

    conversation_id: str = Field(..., description="Conversation this timeline belongs to")
    user_id: str = Field(..., description="Owner of the conversation")
    summaries: list[Summary] = Field(default_factory=list)
    reminders: list[Reminder] = Field(default_factory=list)
    settings: TimelineSettings
    requested_settings: TimelineSettingsRequest | None = Field(
        default=None,
        description="Settings as last requested; effective settings are re-resolved from these on every call",
    )
    last_summary_index: int = Field(
        default=-1,
        ge=-1,
        description="Highest message index covered by a raw summary",
    )
    last_processed_index: int = Field(
        default=-1,
        ge=-1,
        description="Highest message index handed to the orchestrator",
    )

    def unconsolidated_summaries(self) -> list[Summary]:
        """Raw summaries not yet folded into a consolidated summary."""
        return [s for s in self.summaries if not s.is_consolidated]

    def active_reminder(self) -> Reminder | None:
        """Return the single active reminder, if any."""
        for reminder in self.reminders:
            if reminder.is_active:
                return reminder
        return None

    def recent_summary(self) -> Summary | None:
        """Latest summary that has not been absorbed by a consolidation."""
        for summary in reversed(self.summaries):
            if not summary.is_absorbed:
                return summary
        return None
