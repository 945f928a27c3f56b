"""Policy engine for timeline settings.

This module turns user-requested timeline settings into effective settings
by clamping them against the tier's limits, and answers whether a requested
reminder interval is allowed. Policy violations are returned as values so
callers can show an upgrade prompt instead of failing.
"""

import logging

from pydantic import BaseModel, Field

from ..core.config import Settings, settings
from ..core.domain.tiers import Tier, coerce_tier
from ..core.domain.timeline import (
    SummaryFormat,
    TimelineSettings,
    TimelineSettingsRequest,
)
from .table import TierPolicy, limits_for

logger = logging.getLogger(__name__)


class PolicyCheck(BaseModel):
    """Outcome of checking a requested value against a tier's limits."""

    allowed: bool
    reason: str | None = None
    requires_upgrade: bool = False


class SettingsResolution(BaseModel):
    """Effective settings plus every adjustment made to reach them."""

    tier: Tier
    settings: TimelineSettings
    upgrade_required: bool = False
    reasons: list[str] = Field(default_factory=list)

    @property
    def adjusted(self) -> bool:
        """True when any requested value was changed."""
        return bool(self.reasons)


def _clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(upper, value))


class PolicyEngine:
    """Applies the tier policy table to timeline settings."""

    def __init__(self, config: Settings | None = None):
        """Initialize the policy engine.

        Args:
            config: Settings supplying defaults and clamping bounds
        """
        self.config = config or settings

    def check_reminder_interval(
        self,
        tier: Tier | str,
        requested_interval: int,
        paid_user: bool = False,
    ) -> PolicyCheck:
        """Check whether a reminder interval may be used on a tier.

        Args:
            tier: Caller's tier
            requested_interval: Requested turns between reminders
            paid_user: Whether the caller has paid for intervals above the upgrade threshold

        Returns:
            PolicyCheck describing whether the interval is allowed and why not
        """
        policy = limits_for(tier)
        label = policy.tier.value.capitalize()

        if not policy.timeline_reminder_configurable:
            if requested_interval != policy.timeline_reminder_max_interval:
                return PolicyCheck(
                    allowed=False,
                    reason=(
                        f"{label} tier pins the timeline reminder interval at "
                        f"{policy.timeline_reminder_max_interval} turns."
                    ),
                )
            return PolicyCheck(allowed=True)

        threshold = policy.upgrade_threshold
        if threshold is not None and requested_interval > threshold and not paid_user:
            return PolicyCheck(
                allowed=False,
                requires_upgrade=True,
                reason=(
                    f"Reminder intervals above {threshold} turns are available to "
                    "paid members only. Upgrade to unlock them."
                ),
            )

        if requested_interval > policy.timeline_reminder_max_interval:
            return PolicyCheck(
                allowed=False,
                reason=(
                    f"{label} tier allows reminder intervals up to "
                    f"{policy.timeline_reminder_max_interval} turns."
                ),
            )

        return PolicyCheck(allowed=True)

    def resolve_settings(
        self,
        requested: TimelineSettings | TimelineSettingsRequest | None,
        tier: Tier | str,
        paid_user: bool = False,
    ) -> SettingsResolution:
        """Clamp requested settings against the tier's limits.

        This is the single place where optional values become concrete.

        Args:
            requested: Stored or user-requested settings (None for defaults)
            tier: Caller's tier
            paid_user: Whether the caller has paid for intervals above the upgrade threshold

        Returns:
            SettingsResolution with effective settings and adjustment reasons
        """
        tier = coerce_tier(tier)
        policy = limits_for(tier)

        if requested is None:
            request = TimelineSettingsRequest()
        elif isinstance(requested, TimelineSettingsRequest):
            request = requested
        else:
            request = TimelineSettingsRequest(**requested.model_dump())

        reasons: list[str] = []

        summary_interval = self._resolve_summary_interval(request, policy, reasons)
        summary_format = self._resolve_summary_format(request, policy, reasons)
        reminder_interval, upgrade_required = self._resolve_reminder_interval(
            request, policy, paid_user, reasons
        )

        consolidation_interval = _clamp(
            request.consolidation_interval or self.config.default_consolidation_interval,
            self.config.min_consolidation_interval,
            self.config.max_consolidation_interval,
        )
        if (
            request.consolidation_interval is not None
            and consolidation_interval != request.consolidation_interval
        ):
            reasons.append(
                f"Consolidation interval must be between "
                f"{self.config.min_consolidation_interval} and "
                f"{self.config.max_consolidation_interval} turns."
            )

        if policy.summary_toggleable:
            enable_summary = request.enable_conversation_summary is not False
        else:
            enable_summary = True

        if policy.timeline_reminder_configurable:
            enable_reminder = request.enable_timeline_reminder is not False
        else:
            enable_reminder = True

        effective = TimelineSettings(
            summary_interval=summary_interval,
            reminder_interval=reminder_interval,
            consolidation_interval=consolidation_interval,
            summary_format=summary_format,
            enable_timeline_reminder=enable_reminder,
            enable_conversation_summary=enable_summary,
            auto_consolidate=request.auto_consolidate is not False,
        )

        if reasons:
            logger.info(
                f"Clamped timeline settings for tier={tier.value}: {'; '.join(reasons)}"
            )

        return SettingsResolution(
            tier=tier,
            settings=effective,
            upgrade_required=upgrade_required,
            reasons=reasons,
        )

    def default_settings(self, tier: Tier | str) -> TimelineSettings:
        """Effective settings for a tier when nothing was requested."""
        return self.resolve_settings(None, tier).settings

    def _resolve_summary_interval(
        self,
        request: TimelineSettingsRequest,
        policy: TierPolicy,
        reasons: list[str],
    ) -> int:
        if not policy.summary_configurable:
            if request.summary_interval not in (None, policy.summary_interval):
                reasons.append(
                    f"{policy.tier.value.capitalize()} tier fixes the summary interval "
                    f"at {policy.summary_interval} turns."
                )
            return policy.summary_interval

        interval = _clamp(
            request.summary_interval or self.config.default_summary_interval,
            policy.min_summary_interval,
            policy.max_summary_interval,
        )
        if request.summary_interval is not None and interval != request.summary_interval:
            reasons.append(
                f"Summary interval must be between {policy.min_summary_interval} "
                f"and {policy.max_summary_interval} turns."
            )
        return interval

    def _resolve_summary_format(
        self,
        request: TimelineSettingsRequest,
        policy: TierPolicy,
        reasons: list[str],
    ) -> SummaryFormat:
        wanted = request.summary_format or SummaryFormat(self.config.default_summary_format)
        if wanted in policy.available_summary_formats:
            return wanted

        fallback = policy.available_summary_formats[0]
        if request.summary_format is not None:
            reasons.append(
                f"Summary format '{wanted.value}' is not available on the "
                f"{policy.tier.value} tier; using '{fallback.value}'."
            )
        return fallback

    def _resolve_reminder_interval(
        self,
        request: TimelineSettingsRequest,
        policy: TierPolicy,
        paid_user: bool,
        reasons: list[str],
    ) -> tuple[int, bool]:
        if not policy.timeline_reminder_configurable:
            fixed = policy.timeline_reminder_max_interval
            if request.reminder_interval is not None and request.reminder_interval != fixed:
                check = self.check_reminder_interval(
                    policy.tier, request.reminder_interval, paid_user
                )
                reasons.append(check.reason or "")
            return fixed, False

        wanted = request.reminder_interval or self.config.default_reminder_interval
        interval = max(self.config.min_reminder_interval, wanted)
        if interval != wanted:
            reasons.append(
                f"Reminder interval must be at least {self.config.min_reminder_interval} turns."
            )

        check = self.check_reminder_interval(policy.tier, interval, paid_user)
        if check.allowed:
            return interval, False

        reasons.append(check.reason or "")
        if check.requires_upgrade and policy.upgrade_threshold is not None:
            return policy.upgrade_threshold, True
        return min(interval, policy.timeline_reminder_max_interval), False
