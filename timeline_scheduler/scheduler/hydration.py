"""Building timelines: fresh ones and ones re-hydrated from the remote store."""

import logging

from pydantic import ValidationError

from ..core.config import Settings, settings
from ..core.domain.tiers import Tier, coerce_tier
from ..core.domain.timeline import (
    ConversationTimeline,
    Reminder,
    Summary,
    SummarySource,
)
from ..policy_engine import PolicyEngine
from ..remote.client import RemoteTimelineClient
from ..remote.results import RemoteErrorKind
from ..remote.retry import retry_remote_call
from ..remote.schemas import RemoteTimeline

logger = logging.getLogger(__name__)


def new_timeline(
    user_id: str,
    conversation_id: str,
    tier: Tier | str,
    policy_engine: PolicyEngine | None = None,
) -> ConversationTimeline:
    """Create an empty timeline with the tier's default settings."""
    policy_engine = policy_engine or PolicyEngine()
    return ConversationTimeline(
        conversation_id=conversation_id,
        user_id=user_id,
        settings=policy_engine.default_settings(tier),
    )


def _last_trigger_index(trigger_index: int, interval: int, last_processed_index: int) -> int:
    """Map a stored first-fire index onto the last index the reminder fired at.

    The service fires at ``trigger_index`` and every ``interval`` turns after
    it. Before the first fire the result is ``trigger_index - interval``,
    floored at 0.
    """
    if last_processed_index < trigger_index:
        return max(trigger_index - interval, 0)
    return trigger_index + (last_processed_index - trigger_index) // interval * interval


def timeline_from_remote(
    remote: RemoteTimeline,
    tier: Tier | str,
    policy_engine: PolicyEngine | None = None,
) -> ConversationTimeline:
    """Convert a stored timeline document into a ``ConversationTimeline``.

    ``last_summary_index`` is re-derived from the stored summaries and only
    the most recent active reminder is kept active. The stored settings are
    kept as the timeline's requested settings.
    """
    policy_engine = policy_engine or PolicyEngine()
    requested = remote.settings.to_request()
    effective = policy_engine.resolve_settings(requested, tier).settings

    summaries = [
        Summary(
            id=item.id,
            start_index=item.start_index,
            end_index=item.end_index,
            text=item.summary,
            format=effective.summary_format,
            is_consolidated=item.is_consolidated,
            source=SummarySource.REMOTE,
            **({"created_at": item.created_at} if item.created_at else {}),
        )
        for item in remote.summaries
    ]

    last_summary_index = max((s.end_index for s in summaries), default=-1)

    reminders = [
        Reminder(
            id=item.id,
            content=item.content,
            trigger_interval=effective.reminder_interval,
            last_triggered_at=_last_trigger_index(
                max(item.trigger_index, 0),
                effective.reminder_interval,
                last_summary_index,
            ),
            is_active=item.is_active,
            **({"created_at": item.created_at} if item.created_at else {}),
        )
        for item in remote.reminders
    ]
    active = [r for r in reminders if r.is_active]
    for stale in active[:-1]:
        stale.is_active = False

    return ConversationTimeline(
        conversation_id=remote.conversation_id,
        user_id=remote.user_id,
        summaries=summaries,
        reminders=reminders,
        settings=effective,
        requested_settings=requested,
        last_summary_index=last_summary_index,
        last_processed_index=last_summary_index,
    )


async def load_timeline(
    client: RemoteTimelineClient,
    user_id: str,
    conversation_id: str,
    tier: Tier | str,
    *,
    config: Settings | None = None,
    policy_engine: PolicyEngine | None = None,
) -> ConversationTimeline:
    """Load a conversation's timeline, falling back to a fresh one.

    Transport failures are retried with backoff; a missing or unusable
    stored timeline yields an empty timeline for ``tier``.
    """
    config = config or settings
    tier = coerce_tier(tier)
    policy_engine = policy_engine or PolicyEngine(config)

    result = await retry_remote_call(
        lambda: client.fetch_timeline(user_id, conversation_id),
        attempts=config.remote_retry_attempts,
        backoff=config.remote_retry_backoff_seconds,
    )

    if not result.ok:
        if result.error.kind == RemoteErrorKind.NOT_FOUND:
            logger.info(f"No stored timeline for conversation {conversation_id}; starting fresh")
        else:
            logger.warning(
                f"Could not load timeline for conversation {conversation_id} "
                f"({result.error.kind.value}): {result.error.message}"
            )
        return new_timeline(user_id, conversation_id, tier, policy_engine)

    try:
        timeline = timeline_from_remote(result.value, tier, policy_engine)
    except ValidationError as e:
        logger.warning(f"Stored timeline for conversation {conversation_id} is invalid: {str(e)}")
        return new_timeline(user_id, conversation_id, tier, policy_engine)

    logger.info(
        f"Loaded timeline for conversation {conversation_id}: "
        f"{len(timeline.summaries)} summaries, last_summary_index={timeline.last_summary_index}"
    )
    return timeline
