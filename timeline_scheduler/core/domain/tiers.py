"""Subscription tiers and their ordering.

The same ranking drives the policy table and the cross-mode comparison
between a chat's tier and a role's tier.
"""

from enum import Enum

from ..exceptions import UnknownTierError


class Tier(str, Enum):
    """Caller subscription tiers."""

    STANDARD = "standard"
    ADVANCED = "advanced"
    EXPERT = "expert"


class TierComparison(str, Enum):
    """Relationship of a chat's tier to a role's tier."""

    SAME = "same"
    CHAT_LOWER = "chat_lower"
    CHAT_HIGHER = "chat_higher"


_TIER_RANK = {
    Tier.STANDARD: 0,
    Tier.ADVANCED: 1,
    Tier.EXPERT: 2,
}


def coerce_tier(tier: Tier | str) -> Tier:
    """Convert a tier value to ``Tier``, failing loudly on unknown values."""
    if isinstance(tier, Tier):
        return tier
    try:
        return Tier(tier)
    except ValueError as e:
        raise UnknownTierError(f"Unknown tier: {tier!r}") from e


def rank(tier: Tier | str) -> int:
    """Return the total ordering position of a tier."""
    return _TIER_RANK[coerce_tier(tier)]


def compare_tiers(chat_tier: Tier | str, role_tier: Tier | str) -> TierComparison:
    """Compare the tier of a chat with the tier a role was built for."""
    chat_rank = rank(chat_tier)
    role_rank = rank(role_tier)

    if chat_rank == role_rank:
        return TierComparison.SAME
    if chat_rank < role_rank:
        return TierComparison.CHAT_LOWER
    return TierComparison.CHAT_HIGHER
