"""Wire schemas for the remote timeline service.

The service speaks camelCase JSON; these models accept either the wire
aliases or the Python field names.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..core.domain.timeline import SummaryFormat, TimelineSettingsRequest


class WireModel(BaseModel):
    """Base for camelCase payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class RemoteSummary(WireModel):
    """Summary record as stored by the service."""

    id: str
    start_index: int
    end_index: int
    summary: str
    created_at: datetime | None = None
    is_consolidated: bool = False


class RemoteReminder(WireModel):
    """Reminder record as stored by the service."""

    id: str
    content: str
    trigger_index: int = 0
    is_active: bool = True
    created_at: datetime | None = None


class RemoteTimelineSettings(WireModel):
    """Stored timeline settings; every field may be missing."""

    summary_interval: int | None = None
    reminder_interval: int | None = None
    consolidation_interval: int | None = None
    summary_format: str | None = None
    enable_timeline_reminder: bool | None = None
    enable_conversation_summary: bool | None = None
    auto_consolidate: bool | None = None

    def to_request(self) -> TimelineSettingsRequest:
        """Convert to a settings request, dropping unknown formats."""
        values = self.model_dump(exclude_none=True)
        if values.get("summary_format") not in {f.value for f in SummaryFormat}:
            values.pop("summary_format", None)
        return TimelineSettingsRequest(**values)


class RemoteTimeline(WireModel):
    """Timeline document returned by ``GET /timeline/{userId}/{conversationId}``."""

    id: str | None = None
    conversation_id: str
    user_id: str
    summaries: list[RemoteSummary] = Field(default_factory=list)
    reminders: list[RemoteReminder] = Field(default_factory=list)
    settings: RemoteTimelineSettings = Field(default_factory=RemoteTimelineSettings)


class ReminderCheck(WireModel):
    """Outcome of ``POST /timeline/reminder/check``."""

    should_trigger: bool = False
    reminders: list[RemoteReminder] = Field(default_factory=list)


# Response envelopes

class SummaryEnvelope(WireModel):
    success: bool
    summary: RemoteSummary | None = None
    error: str | None = None


class ReminderEnvelope(WireModel):
    success: bool
    reminder: RemoteReminder | None = None
    error: str | None = None


class ReminderCheckEnvelope(WireModel):
    success: bool
    should_trigger: bool = False
    reminders: list[RemoteReminder] = Field(default_factory=list)
    error: str | None = None


class TimelineEnvelope(WireModel):
    success: bool
    timeline: RemoteTimeline | None = None
    has_timeline: bool = False
    error: str | None = None


def dump_wire(payload: dict[str, Any]) -> dict[str, Any]:
    """Drop ``None`` values from a request body."""
    return {key: value for key, value in payload.items() if value is not None}
