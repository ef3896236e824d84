"""
Unit Tests for Invariant Validator

Tests verify the payee-protection rules on single breakdowns and on
organization-wide fee changes.
"""

import pytest
from commission_engine.errors import (
    CombinedFeeExceedsMaximum,
    MarketingFeeOutOfRange,
    NegativePayeeShare,
    PayeeShareBelowMinimum,
)
from commission_engine.models import CommissionBreakdown, OrganizationFeeConfig, PlanType, Tier
from commission_engine.validators import InvariantValidator


def make_breakdown(gross, platform_rate, org_rate, organization_id="org_1", payee=None):
    platform = gross * platform_rate // 10000
    org = gross * org_rate // 10000
    return CommissionBreakdown(
        gross_amount=gross,
        currency="EUR",
        payee_id="exp_1",
        tier=Tier.COMMUNITY,
        plan_type=PlanType.COMMISSION,
        platform_fee_rate=platform_rate,
        platform_fee_amount=platform,
        organization_fee_rate=org_rate,
        organization_fee_amount=org,
        payee_net_amount=gross - platform - org if payee is None else payee,
        organization_id=organization_id,
    )


class TestBreakdownChecks:
    """Test checks on a single computed breakdown."""

    @pytest.fixture
    def validator(self):
        return InvariantValidator()

    @pytest.fixture
    def org_config(self):
        return OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=1500)

    def test_valid_three_party_breakdown(self, validator, org_config):
        assert validator.check(make_breakdown(10000, 800, 1500), org_config) == []

    def test_exact_bounds_are_allowed(self, validator, org_config):
        """Payee at exactly 60% and fees at exactly 40% pass."""
        breakdown = make_breakdown(10000, 2000, 2000)
        assert breakdown.payee_net_amount == 6000
        assert validator.check(breakdown, org_config) == []

    def test_negative_payee_short_circuits(self, validator, org_config):
        breakdown = make_breakdown(100, 8000, 3000, payee=-10)
        violations = validator.check(breakdown, org_config)

        assert violations == [NegativePayeeShare(gross_amount=100, payee_net_amount=-10)]

    def test_negative_payee_checked_without_organization(self, validator):
        breakdown = make_breakdown(100, 2000, 0, organization_id=None, payee=-1)
        violations = validator.check(breakdown)

        assert isinstance(violations[0], NegativePayeeShare)

    def test_two_party_skips_organization_rules(self, validator):
        breakdown = make_breakdown(10000, 2000, 0, organization_id=None)
        assert validator.check(breakdown, None) == []

    def test_both_rules_reported_in_order(self, validator, org_config):
        violations = validator.check(make_breakdown(10000, 2000, 2500), org_config)

        assert violations == [
            PayeeShareBelowMinimum(actual=5500, required=6000, payee_id="exp_1"),
            CombinedFeeExceedsMaximum(actual=4500, maximum=4000, payee_id="exp_1"),
        ]

    def test_only_combined_maximum(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=2500, expert_minimum_share=5000)
        violations = validator.check(make_breakdown(10000, 2000, 2500), config)

        assert violations == [CombinedFeeExceedsMaximum(actual=4500, maximum=4000, payee_id="exp_1")]

    def test_only_minimum_share(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=1500, expert_minimum_share=8000)
        violations = validator.check(make_breakdown(10000, 800, 1500), config)

        assert violations == [PayeeShareBelowMinimum(actual=7700, required=8000, payee_id="exp_1")]

    def test_zero_gross_is_trivially_valid(self, validator, org_config):
        assert validator.check(make_breakdown(0, 800, 1500), org_config) == []

    def test_actual_share_rounds_down(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=1500, expert_minimum_share=9000)
        breakdown = make_breakdown(3, 0, 0, payee=1)

        violations = validator.check(breakdown, config)

        assert violations[0].actual == 3333


class TestFeeChangeChecks:
    """Test the all-or-nothing batch check of a marketing fee change."""

    @pytest.fixture
    def validator(self):
        return InvariantValidator()

    def test_all_payees_within_bounds(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=1500)
        rates = [("exp_top", 800), ("exp_community", 2000)]

        assert validator.check_fee_change(config, rates) == []

    def test_one_payee_over_the_limit_rejects(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=2500)
        rates = [("exp_top", 800), ("exp_community", 2000)]

        violations = validator.check_fee_change(config, rates)

        assert violations == [
            PayeeShareBelowMinimum(actual=5500, required=6000, payee_id="exp_community"),
            CombinedFeeExceedsMaximum(actual=4500, maximum=4000, payee_id="exp_community"),
        ]

    def test_every_failing_payee_is_reported(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=2500)
        rates = [("exp_a", 2000), ("exp_b", 1600), ("exp_c", 800)]

        violations = validator.check_fee_change(config, rates)

        assert {v.payee_id for v in violations} == {"exp_a", "exp_b"}

    def test_fee_below_settable_range(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=900)

        violations = validator.check_fee_change(config, [])

        assert violations == [MarketingFeeOutOfRange(actual=900, minimum=1000, maximum=2500)]

    def test_fee_above_settable_range(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=2600)

        violations = validator.check_fee_change(config, [("exp_top", 800)])

        assert isinstance(violations[0], MarketingFeeOutOfRange)

    def test_no_payees_with_valid_fee(self, validator):
        config = OrganizationFeeConfig(organization_id="org_1", marketing_fee_rate=2000)
        assert validator.check_fee_change(config, []) == []
