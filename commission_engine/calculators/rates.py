"""
Rate Resolution

Maps an expert's (tier, plan type) to the platform commission rate and reads
the organization's marketing fee. Pure lookups against a PricingConfig.
"""

import logging

from ..errors import UnknownPlanConfiguration
from ..models import OrganizationFeeConfig, PlanType, Tier
from ..pricing import PricingConfig

logger = logging.getLogger(__name__)


class RateResolver:
    """Resolves applicable rates in basis points."""

    def __init__(self, pricing: PricingConfig):
        self.pricing = pricing

    def resolve(self, tier: Tier, plan_type: PlanType) -> int | UnknownPlanConfiguration:
        """
        Return the platform rate for (tier, plan_type).

        A missing entry means the plan table and the billing system disagree.
        It is never defaulted.
        """
        plan = self.pricing.plan(tier, plan_type)
        if plan is None:
            error = UnknownPlanConfiguration(tier=_name(tier), plan_type=_name(plan_type))
            logger.error(error.message())
            return error
        return plan.commission_rate

    def resolve_organization_rate(self, org_config: OrganizationFeeConfig | None) -> int:
        """Marketing fee of the owning organization, 0 for solo experts."""
        if org_config is None:
            return 0
        return org_config.marketing_fee_rate


def _name(value) -> str:
    return getattr(value, "value", str(value))
