"""Unit tests for the timeline policy table and engine."""

import pytest

from timeline_scheduler.core.config import Settings
from timeline_scheduler.core.domain.tiers import Tier, rank
from timeline_scheduler.core.domain.timeline import (
    SummaryFormat,
    TimelineSettings,
    TimelineSettingsRequest,
)
from timeline_scheduler.core.exceptions import UnknownTierError
from timeline_scheduler.policy_engine import (
    POLICIES_BY_RANK,
    POLICY_TABLE,
    PolicyEngine,
    limits_for,
)


class TestPolicyTable:
    """Test cases for the static policy table."""

    def test_table_covers_every_tier(self) -> None:
        """Test that every tier has an entry."""
        assert set(POLICY_TABLE) == set(Tier)

    def test_rows_ordered_by_rank(self) -> None:
        """Test that each row sits at its tier's rank."""
        for tier in Tier:
            assert POLICIES_BY_RANK[rank(tier)].tier == tier
            assert limits_for(tier) is POLICY_TABLE[tier]

    def test_limits_grow_with_rank(self) -> None:
        """Test that higher tiers never have tighter reminder or format limits."""
        for lower, higher in zip(POLICIES_BY_RANK, POLICIES_BY_RANK[1:]):
            assert higher.timeline_reminder_max_interval >= lower.timeline_reminder_max_interval
            assert set(lower.available_summary_formats) <= set(higher.available_summary_formats)

    def test_standard_limits(self) -> None:
        """Test the standard tier pins the reminder interval."""
        policy = limits_for(Tier.STANDARD)

        assert policy.timeline_reminder_max_interval == 10
        assert policy.timeline_reminder_configurable is False
        assert policy.upgrade_threshold is None

    def test_advanced_limits(self) -> None:
        """Test the advanced tier carries an upgrade threshold below its ceiling."""
        policy = limits_for("advanced")

        assert policy.timeline_reminder_configurable is True
        assert policy.upgrade_threshold == 20
        assert policy.timeline_reminder_max_interval == 30

    def test_expert_has_highest_ceiling(self) -> None:
        """Test the expert ceiling is the highest."""
        ceilings = {tier: limits_for(tier).timeline_reminder_max_interval for tier in Tier}
        assert ceilings[Tier.EXPERT] == max(ceilings.values())

    def test_unknown_tier(self) -> None:
        """Test that unknown tiers fail fast."""
        with pytest.raises(UnknownTierError):
            limits_for("gold")


class TestCheckReminderInterval:
    """Test cases for reminder interval checks."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = PolicyEngine(Settings())

    def test_standard_only_allows_fixed_value(self) -> None:
        """Test that standard accepts 10 and nothing else."""
        assert self.engine.check_reminder_interval(Tier.STANDARD, 10).allowed is True

        check = self.engine.check_reminder_interval(Tier.STANDARD, 15)
        assert check.allowed is False
        assert "10 turns" in check.reason
        assert check.requires_upgrade is False

    def test_advanced_above_threshold_requires_upgrade(self) -> None:
        """Test that unpaid advanced users are prompted to upgrade."""
        check = self.engine.check_reminder_interval(Tier.ADVANCED, 25)

        assert check.allowed is False
        assert check.requires_upgrade is True
        assert "paid members" in check.reason

    def test_advanced_paid_user_within_ceiling(self) -> None:
        """Test that paid advanced users may go past the threshold."""
        assert self.engine.check_reminder_interval(Tier.ADVANCED, 25, paid_user=True).allowed is True

    def test_advanced_paid_user_above_ceiling(self) -> None:
        """Test that the ceiling applies even to paid users."""
        check = self.engine.check_reminder_interval(Tier.ADVANCED, 40, paid_user=True)

        assert check.allowed is False
        assert check.requires_upgrade is False
        assert "30 turns" in check.reason

    def test_expert_ceiling(self) -> None:
        """Test the expert ceiling."""
        assert self.engine.check_reminder_interval(Tier.EXPERT, 50).allowed is True
        assert self.engine.check_reminder_interval(Tier.EXPERT, 51).allowed is False


class TestResolveSettings:
    """Test cases for clamping settings against tier limits."""

    def setup_method(self):
        """Set up test fixtures."""
        self.engine = PolicyEngine(Settings())

    def test_defaults(self) -> None:
        """Test that no request yields concrete default settings."""
        resolution = self.engine.resolve_settings(None, Tier.ADVANCED)

        assert resolution.settings == TimelineSettings(
            summary_interval=12,
            reminder_interval=10,
            consolidation_interval=40,
            summary_format=SummaryFormat.BULLET,
            enable_timeline_reminder=True,
            enable_conversation_summary=True,
            auto_consolidate=True,
        )
        assert resolution.upgrade_required is False
        assert resolution.adjusted is False

    @pytest.mark.parametrize("requested", [1, 5, 9, 11, 30, 50])
    def test_standard_reminder_interval_is_always_fixed(self, requested) -> None:
        """Test the standard tier stores exactly the fixed interval."""
        request = TimelineSettingsRequest(reminder_interval=requested)

        resolution = self.engine.resolve_settings(request, Tier.STANDARD)

        assert resolution.settings.reminder_interval == 10
        assert resolution.adjusted is True

    def test_standard_ignores_summary_customisation(self) -> None:
        """Test the standard tier fixes summary interval, format and toggle."""
        request = TimelineSettingsRequest(
            summary_interval=5,
            summary_format=SummaryFormat.PARAGRAPH,
            enable_conversation_summary=False,
        )

        settings = self.engine.resolve_settings(request, Tier.STANDARD).settings

        assert settings.summary_interval == 12
        assert settings.summary_format == SummaryFormat.BULLET
        assert settings.enable_conversation_summary is True

    def test_advanced_upgrade_required(self) -> None:
        """Test that an unpaid interval above the threshold is held back and flagged."""
        request = TimelineSettingsRequest(reminder_interval=25)

        resolution = self.engine.resolve_settings(request, Tier.ADVANCED)

        assert resolution.upgrade_required is True
        assert resolution.settings.reminder_interval == 20
        assert any("Upgrade" in reason for reason in resolution.reasons)

    def test_advanced_paid_user_clamped_to_ceiling(self) -> None:
        """Test that paid users are clamped to the ceiling without an upgrade flag."""
        request = TimelineSettingsRequest(reminder_interval=45)

        resolution = self.engine.resolve_settings(request, Tier.ADVANCED, paid_user=True)

        assert resolution.upgrade_required is False
        assert resolution.settings.reminder_interval == 30

    def test_reminder_interval_floor(self) -> None:
        """Test the minimum reminder interval."""
        request = TimelineSettingsRequest(reminder_interval=2)

        settings = self.engine.resolve_settings(request, Tier.EXPERT).settings

        assert settings.reminder_interval == 5

    def test_summary_interval_clamped_to_tier_range(self) -> None:
        """Test summary interval bounds per tier."""
        low = TimelineSettingsRequest(summary_interval=3)
        high = TimelineSettingsRequest(summary_interval=99)

        assert self.engine.resolve_settings(low, Tier.ADVANCED).settings.summary_interval == 8
        assert self.engine.resolve_settings(high, Tier.ADVANCED).settings.summary_interval == 25
        assert self.engine.resolve_settings(low, Tier.EXPERT).settings.summary_interval == 5
        assert self.engine.resolve_settings(high, Tier.EXPERT).settings.summary_interval == 50

    def test_summary_format_availability(self) -> None:
        """Test that unavailable formats fall back to the tier's first format."""
        request = TimelineSettingsRequest(summary_format=SummaryFormat.SENTENCES)

        advanced = self.engine.resolve_settings(request, Tier.ADVANCED)
        expert = self.engine.resolve_settings(request, Tier.EXPERT)

        assert advanced.settings.summary_format == SummaryFormat.BULLET
        assert advanced.adjusted is True
        assert expert.settings.summary_format == SummaryFormat.SENTENCES

    def test_consolidation_interval_bounds(self) -> None:
        """Test that the consolidation interval is clamped to 30..100."""
        low = TimelineSettingsRequest(consolidation_interval=10)
        high = TimelineSettingsRequest(consolidation_interval=500)
        exact = TimelineSettingsRequest(consolidation_interval=30)

        assert self.engine.resolve_settings(low, Tier.EXPERT).settings.consolidation_interval == 30
        assert self.engine.resolve_settings(high, Tier.EXPERT).settings.consolidation_interval == 100
        assert self.engine.resolve_settings(exact, Tier.EXPERT).settings.consolidation_interval == 30

    def test_toggles_honoured_on_configurable_tiers(self) -> None:
        """Test that advanced users can switch features off."""
        request = TimelineSettingsRequest(
            enable_conversation_summary=False,
            enable_timeline_reminder=False,
            auto_consolidate=False,
        )

        settings = self.engine.resolve_settings(request, Tier.ADVANCED).settings

        assert settings.enable_conversation_summary is False
        assert settings.enable_timeline_reminder is False
        assert settings.auto_consolidate is False

    def test_stored_settings_are_reclamped(self) -> None:
        """Test that stored settings are re-clamped when the tier changes."""
        stored = self.engine.resolve_settings(
            TimelineSettingsRequest(reminder_interval=40, summary_interval=50),
            Tier.EXPERT,
        ).settings

        downgraded = self.engine.resolve_settings(stored, Tier.STANDARD).settings

        assert downgraded.reminder_interval == 10
        assert downgraded.summary_interval == 12

    def test_unknown_tier(self) -> None:
        """Test that unknown tiers fail fast."""
        with pytest.raises(UnknownTierError):
            self.engine.resolve_settings(None, "platinum")
