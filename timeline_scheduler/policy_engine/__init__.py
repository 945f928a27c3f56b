"""Policy Engine - tier limits for timeline scheduling.

This module provides the static per-tier policy table and the engine
that clamps requested timeline settings against it.
"""

from .engine import PolicyCheck, PolicyEngine, SettingsResolution
from .table import POLICIES_BY_RANK, POLICY_TABLE, TierPolicy, limits_for

__all__ = [
    "POLICIES_BY_RANK",
    "POLICY_TABLE",
    "PolicyCheck",
    "PolicyEngine",
    "SettingsResolution",
    "TierPolicy",
    "limits_for",
]
