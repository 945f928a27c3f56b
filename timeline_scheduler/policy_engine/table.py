"""Per-tier timeline limits.

The table is static and ordered by tier rank; tiers outside the closed set
are a programmer error.
"""

from pydantic import BaseModel, ConfigDict, Field

from ..core.domain.tiers import Tier, rank
from ..core.domain.timeline import SummaryFormat


class TierPolicy(BaseModel):
    """Timeline limits for one tier."""

    model_config = ConfigDict(frozen=True)

    tier: Tier
    timeline_reminder_max_interval: int = Field(..., description="Ceiling for the reminder interval")
    timeline_reminder_configurable: bool = Field(..., description="Whether users may change the reminder interval")
    upgrade_threshold: int | None = Field(
        None,
        description="Reminder intervals above this require a paid upgrade",
    )
    summary_interval: int = Field(..., description="Default summary interval")
    summary_configurable: bool
    summary_toggleable: bool
    min_summary_interval: int
    max_summary_interval: int
    available_summary_formats: tuple[SummaryFormat, ...]


# Ordered by rank(tier)
POLICIES_BY_RANK: tuple[TierPolicy, ...] = (
    TierPolicy(
        tier=Tier.STANDARD,
        timeline_reminder_max_interval=10,
        timeline_reminder_configurable=False,
        upgrade_threshold=None,
        summary_interval=12,
        summary_configurable=False,
        summary_toggleable=False,
        min_summary_interval=12,
        max_summary_interval=12,
        available_summary_formats=(SummaryFormat.BULLET,),
    ),
    TierPolicy(
        tier=Tier.ADVANCED,
        timeline_reminder_max_interval=30,
        timeline_reminder_configurable=True,
        upgrade_threshold=20,
        summary_interval=12,
        summary_configurable=True,
        summary_toggleable=True,
        min_summary_interval=8,
        max_summary_interval=25,
        available_summary_formats=(SummaryFormat.BULLET, SummaryFormat.PARAGRAPH),
    ),
    TierPolicy(
        tier=Tier.EXPERT,
        timeline_reminder_max_interval=50,
        timeline_reminder_configurable=True,
        upgrade_threshold=None,
        summary_interval=12,
        summary_configurable=True,
        summary_toggleable=True,
        min_summary_interval=5,
        max_summary_interval=50,
        available_summary_formats=(
            SummaryFormat.BULLET,
            SummaryFormat.PARAGRAPH,
            SummaryFormat.SENTENCES,
        ),
    ),
)

POLICY_TABLE: dict[Tier, TierPolicy] = {policy.tier: policy for policy in POLICIES_BY_RANK}


def limits_for(tier: Tier | str) -> TierPolicy:
    """Look up the limits for a tier.

    Raises:
        UnknownTierError: If ``tier`` is not one of the defined tiers
    """
    return POLICIES_BY_RANK[rank(tier)]
