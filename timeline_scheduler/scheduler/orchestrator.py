"""Timeline orchestrator.

This module provides the ``TimelineOrchestrator`` that runs once per new
message: it resolves the tier-clamped settings, produces a summary when one
is due (remote first, local fallback), consolidates raw summaries on
consolidation turns, and decides whether a progress reminder fires.

The orchestrator keeps no state between calls; everything lives on the
``ConversationTimeline`` supplied by the caller, which is mutated in place.
Calls for one conversation must be serialized by the caller.
"""

import logging
from datetime import datetime, timezone

from pydantic import BaseModel, Field

from ..core.config import Settings, settings
from ..core.domain.conversation import Conversation
from ..core.domain.tiers import Tier, coerce_tier
from ..core.domain.timeline import (
    ConversationTimeline,
    Reminder,
    ReminderType,
    Summary,
    SummarySource,
    TimelineSettings,
    TimelineSettingsRequest,
)
from ..core.exceptions import InvariantViolationError
from ..policy_engine import PolicyEngine, SettingsResolution, limits_for
from ..remote.client import RemoteTimelineClient, wire_summary_format
from ..remote.results import RemoteErrorKind
from ..summarization import LocalSummarizer, consolidate, mark_absorbed
from .triggers import consolidation_due, reminder_due, summary_due

logger = logging.getLogger(__name__)

STARTED_REMINDER_CONTENT = "The conversation has started."


class ProcessResult(BaseModel):
    """Outcome of processing one new message."""

    timeline: ConversationTimeline
    should_trigger_reminder: bool = False
    settings_resolution: SettingsResolution | None = None
    summary_created: Summary | None = None
    consolidated_summary: Summary | None = None
    reminder_created: Reminder | None = None
    errors: list[str] = Field(
        default_factory=list,
        description="Steps that failed without aborting the call",
    )

    @property
    def upgrade_required(self) -> bool:
        """True when the stored reminder interval needs a paid upgrade."""
        return bool(self.settings_resolution and self.settings_resolution.upgrade_required)


class TimelineOrchestrator:
    """Schedules summaries, consolidations and reminders for a conversation."""

    def __init__(
        self,
        remote_client: RemoteTimelineClient | None = None,
        policy_engine: PolicyEngine | None = None,
        summarizer: LocalSummarizer | None = None,
        config: Settings | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            remote_client: Client for the remote timeline service; when None
                (or when remote calls are disabled) only the local path runs
            policy_engine: Engine clamping settings to tier limits
            summarizer: Local fallback summarizer
            config: Settings supplying defaults
        """
        self.config = config or settings
        self.remote_client = remote_client if self.config.remote_enabled else None
        self.policy_engine = policy_engine or PolicyEngine(self.config)
        self.summarizer = summarizer or LocalSummarizer()

    async def process_new_message(
        self,
        timeline: ConversationTimeline,
        conversation: Conversation,
        current_index: int,
        tier: Tier | str,
        *,
        paid_user: bool = False,
    ) -> ProcessResult:
        """Update the timeline for the message at ``current_index``.

        Args:
            timeline: Conversation timeline, mutated in place
            conversation: Conversation whose message list is read
            current_index: Index of the newly appended message
            tier: Caller's tier
            paid_user: Whether the caller has paid for long reminder intervals

        Returns:
            ProcessResult carrying the timeline and the reminder decision

        Raises:
            InvariantViolationError: On a malformed call (unknown tier,
                bad index, wrong aggregate)
        """
        tier = self._validate_call(timeline, conversation, current_index, tier)
        result = ProcessResult(timeline=timeline)

        # 1. Effective settings, re-resolved from the stored request
        requested = timeline.requested_settings or TimelineSettingsRequest(
            **timeline.settings.model_dump()
        )
        resolution = self.policy_engine.resolve_settings(requested, tier, paid_user)
        if timeline.requested_settings is None and resolution.adjusted:
            timeline.requested_settings = requested
        timeline.settings = resolution.settings
        result.settings_resolution = resolution
        effective = resolution.settings

        if resolution.upgrade_required:
            logger.info(
                f"Reminder interval for conversation {timeline.conversation_id} "
                f"requires an upgrade; holding it at {effective.reminder_interval} turns"
            )

        # 2. Summary
        result.summary_created = await self._run_step(
            "summary",
            result,
            self._summary_step(timeline, conversation, current_index, effective),
        )

        # 3. Consolidation
        result.consolidated_summary = await self._run_step(
            "consolidation",
            result,
            self._consolidation_step(timeline, current_index, effective),
        )

        # 4. Reminder
        reminder_outcome = await self._run_step(
            "reminder",
            result,
            self._reminder_step(timeline, current_index, effective, tier),
        )
        if reminder_outcome is not None:
            result.should_trigger_reminder, result.reminder_created = reminder_outcome

        timeline.last_processed_index = max(timeline.last_processed_index, current_index)

        logger.info(
            f"Processed message {current_index} of conversation {timeline.conversation_id}: "
            f"summaries={len(timeline.summaries)}, reminders={len(timeline.reminders)}, "
            f"trigger_reminder={result.should_trigger_reminder}"
        )
        return result

    def apply_settings(
        self,
        timeline: ConversationTimeline,
        request: TimelineSettingsRequest,
        tier: Tier | str,
        paid_user: bool = False,
    ) -> SettingsResolution:
        """Clamp user-requested settings for ``tier`` and store the result.

        The request itself is kept on the timeline so later calls can apply
        values a different tier or payment state unlocks. Policy violations
        are reported in the resolution, never raised.
        """
        if not isinstance(timeline, ConversationTimeline):
            raise InvariantViolationError(
                f"Expected ConversationTimeline, got {type(timeline).__name__}"
            )

        resolution = self.policy_engine.resolve_settings(request, tier, paid_user)
        timeline.requested_settings = request.model_copy()
        timeline.settings = resolution.settings

        logger.info(
            f"Saved timeline settings for conversation {timeline.conversation_id} "
            f"(tier={resolution.tier.value}, adjusted={resolution.adjusted})"
        )
        return resolution

    def _validate_call(
        self,
        timeline: ConversationTimeline,
        conversation: Conversation,
        current_index: int,
        tier: Tier | str,
    ) -> Tier:
        """Check call invariants before anything is mutated."""
        if not isinstance(timeline, ConversationTimeline):
            raise InvariantViolationError(
                f"Expected ConversationTimeline, got {type(timeline).__name__}"
            )
        if not isinstance(conversation, Conversation):
            raise InvariantViolationError(
                f"Expected Conversation, got {type(conversation).__name__}"
            )
        if conversation.conversation_id != timeline.conversation_id:
            raise InvariantViolationError(
                f"Timeline belongs to conversation {timeline.conversation_id}, "
                f"not {conversation.conversation_id}"
            )

        tier = coerce_tier(tier)

        if isinstance(current_index, bool) or not isinstance(current_index, int):
            raise InvariantViolationError(f"Message index must be an int, got {current_index!r}")
        if current_index < 0:
            raise InvariantViolationError(f"Message index must be non-negative, got {current_index}")
        if current_index >= len(conversation.messages):
            raise InvariantViolationError(
                f"Message index {current_index} is beyond the "
                f"{len(conversation.messages)} messages of the conversation"
            )
        if current_index < timeline.last_processed_index:
            raise InvariantViolationError(
                f"Message index {current_index} precedes the last processed "
                f"index {timeline.last_processed_index}"
            )
        if current_index < timeline.last_summary_index:
            raise InvariantViolationError(
                f"Message index {current_index} precedes the last summarized "
                f"index {timeline.last_summary_index}"
            )

        return tier

    async def _run_step(self, name, result: ProcessResult, step):
        """Await one step, recording failures without aborting the call."""
        try:
            return await step
        except InvariantViolationError:
            raise
        except Exception as e:
            logger.error(
                f"Timeline step '{name}' failed for conversation "
                f"{result.timeline.conversation_id}: {str(e)}"
            )
            result.errors.append(f"{name}: {str(e)}")
            return None

    async def _summary_step(
        self,
        timeline: ConversationTimeline,
        conversation: Conversation,
        current_index: int,
        effective: TimelineSettings,
    ) -> Summary | None:
        if not effective.enable_conversation_summary:
            return None
        if not summary_due(current_index, timeline.last_summary_index, effective.summary_interval):
            return None

        start_index = timeline.last_summary_index + 1
        summary = await self._remote_summary(
            timeline, conversation, start_index, current_index, effective
        )
        if summary is None:
            text = self.summarizer.summarize(
                conversation.messages,
                start_index,
                current_index,
                effective.summary_format,
            )
            summary = Summary(
                start_index=start_index,
                end_index=current_index,
                text=text,
                format=effective.summary_format,
                source=SummarySource.LOCAL,
            )

        timeline.summaries.append(summary)
        timeline.last_summary_index = current_index

        logger.info(
            f"Created {summary.source.value} summary {summary.id} for messages "
            f"{start_index}-{current_index} of conversation {timeline.conversation_id}"
        )
        return summary

    async def _remote_summary(
        self,
        timeline: ConversationTimeline,
        conversation: Conversation,
        start_index: int,
        end_index: int,
        effective: TimelineSettings,
    ) -> Summary | None:
        """Try the remote service; None means use the local summarizer."""
        if self.remote_client is None:
            return None

        try:
            result = await self.remote_client.request_summary(
                timeline.user_id,
                timeline.conversation_id,
                conversation.messages,
                start_index,
                end_index,
                effective.summary_format,
            )
        except Exception as e:
            logger.error(f"Remote summary call raised, using local summarizer: {str(e)}")
            return None

        if not result.ok:
            error = result.error
            if error.kind == RemoteErrorKind.TRANSPORT:
                logger.warning(f"Timeline service unavailable, using local summarizer: {error.message}")
            elif error.kind == RemoteErrorKind.POLICY_REJECTED:
                logger.info(f"Remote summary rejected by policy, using local summarizer: {error.message}")
            elif error.kind == RemoteErrorKind.NOT_FOUND:
                logger.warning("Remote summary endpoint not found, using local summarizer")
            else:
                logger.warning(f"Unusable remote summary, using local summarizer: {error.message}")
            return None

        remote = result.value
        if remote.start_index != start_index or remote.end_index != end_index:
            logger.warning(
                f"Remote summary covers {remote.start_index}-{remote.end_index}, "
                f"expected {start_index}-{end_index}; using local summarizer"
            )
            return None

        return Summary(
            id=remote.id,
            start_index=start_index,
            end_index=end_index,
            text=remote.summary,
            format=wire_summary_format(effective.summary_format),
            created_at=remote.created_at or datetime.now(timezone.utc),
            source=SummarySource.REMOTE,
        )

    async def _consolidation_step(
        self,
        timeline: ConversationTimeline,
        current_index: int,
        effective: TimelineSettings,
    ) -> Summary | None:
        if not effective.auto_consolidate:
            return None
        if not consolidation_due(current_index, effective.consolidation_interval):
            return None

        eligible = timeline.unconsolidated_summaries()
        if len(eligible) < self.config.consolidation_min_summaries:
            logger.debug(
                f"Skipping consolidation at {current_index}: only {len(eligible)} "
                f"unconsolidated summaries"
            )
            return None

        consolidated = consolidate(eligible)
        timeline.summaries.append(consolidated)
        mark_absorbed(eligible)

        logger.info(
            f"Consolidated {len(eligible)} summaries into {consolidated.id} covering "
            f"{consolidated.start_index}-{consolidated.end_index}"
        )
        return consolidated

    async def _reminder_step(
        self,
        timeline: ConversationTimeline,
        current_index: int,
        effective: TimelineSettings,
        tier: Tier,
    ) -> tuple[bool, Reminder | None]:
        if not effective.enable_timeline_reminder:
            return False, None
        if not limits_for(tier).timeline_reminder_configurable:
            return False, None

        active = timeline.active_reminder()
        last_triggered_at = active.last_triggered_at if active else None
        if not reminder_due(current_index, last_triggered_at, effective.reminder_interval):
            return False, None

        if active is not None:
            active.last_triggered_at = current_index
            logger.info(f"Reminder {active.id} triggered at message {current_index}")
            return True, None

        reminder = await self._create_reminder(timeline, current_index, effective)
        timeline.reminders.append(reminder)
        logger.info(f"Created reminder {reminder.id} at message {current_index}")
        return True, reminder

    async def _create_reminder(
        self,
        timeline: ConversationTimeline,
        current_index: int,
        effective: TimelineSettings,
    ) -> Reminder:
        recent = timeline.recent_summary()
        content = (
            f"Recent conversation summary: {recent.text}" if recent else STARTED_REMINDER_CONTENT
        )
        reminder = Reminder(
            content=content,
            trigger_interval=effective.reminder_interval,
            last_triggered_at=current_index,
            reminder_type=ReminderType.PROGRESS,
        )

        if self.remote_client is None:
            return reminder

        try:
            result = await self.remote_client.request_reminder_set(
                timeline.user_id,
                timeline.conversation_id,
                ReminderType.PROGRESS,
                content=content,
                message_count=effective.reminder_interval,
            )
        except Exception as e:
            logger.error(f"Remote reminder call raised, keeping local reminder: {str(e)}")
            return reminder

        if not result.ok:
            logger.warning(f"Remote reminder registration failed: {result.error.message}")
            return reminder

        remote = result.value
        reminder.id = remote.id
        reminder.content = remote.content or content
        if remote.created_at is not None:
            reminder.created_at = remote.created_at
        return reminder
