"""
Pricing Configuration

Rate tables, subscription fees and eligibility thresholds. A PricingConfig is
immutable and is passed explicitly into every engine call, so alternate tables
can be used in tests or loaded from a JSON file without touching module state.

Default commission rates (basis points):

    Community Expert: commission 20%, monthly 12% (€49/mo), annual 12% (€490/yr)
    Top Expert:       commission 10%, monthly 8% (€155/mo), annual 8% (€1,490/yr)
"""

import json
import logging
import os
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Mapping

from .models import BASIS_POINTS, EligibilityThreshold, PlanPricing, PlanType, Tier

logger = logging.getLogger(__name__)

PRICING_CONFIG_ENV = "PRICING_CONFIG_PATH"

# Longest commitment last; rates must not increase along this order.
PLAN_COMMITMENT_ORDER = (PlanType.COMMISSION, PlanType.MONTHLY, PlanType.ANNUAL)
TIER_ORDER = (Tier.COMMUNITY, Tier.TOP)

# Strictly decreasing platform rates, most expensive first.
RATE_CHAIN = (
    (Tier.COMMUNITY, (PlanType.COMMISSION,)),
    (Tier.COMMUNITY, (PlanType.MONTHLY, PlanType.ANNUAL)),
    (Tier.TOP, (PlanType.COMMISSION,)),
    (Tier.TOP, (PlanType.MONTHLY, PlanType.ANNUAL)),
)


@dataclass(frozen=True)
class PricingConfig:
    """Immutable snapshot of every table the engine depends on."""

    plans: Mapping[tuple[Tier, PlanType], PlanPricing]
    thresholds: Mapping[Tier, EligibilityThreshold]

    def __post_init__(self):
        object.__setattr__(self, "plans", MappingProxyType(dict(self.plans)))
        object.__setattr__(self, "thresholds", MappingProxyType(dict(self.thresholds)))
        self._validate_rates()
        self._validate_ordering()

    def plan(self, tier: Tier, plan_type: PlanType) -> PlanPricing | None:
        return self.plans.get((tier, plan_type))

    def threshold(self, tier: Tier) -> EligibilityThreshold | None:
        return self.thresholds.get(tier)

    def _validate_rates(self) -> None:
        """Platform rates are whole basis points in [0, 10000)."""
        for (tier, plan_type), plan in self.plans.items():
            rate = plan.commission_rate
            if isinstance(rate, bool) or not isinstance(rate, int) or not (0 <= rate < BASIS_POINTS):
                raise ValueError(
                    f"{tier.value}/{plan_type.value} rate must be an integer in [0, {BASIS_POINTS}) "
                    f"basis points, got: {rate!r}"
                )

    def _validate_ordering(self) -> None:
        """Higher tier and longer commitment must never raise the platform rate."""
        for tier in TIER_ORDER:
            rates = [
                (plan_type, self.plans[(tier, plan_type)].commission_rate)
                for plan_type in PLAN_COMMITMENT_ORDER
                if (tier, plan_type) in self.plans
            ]
            for (shorter, shorter_rate), (longer, longer_rate) in zip(rates, rates[1:]):
                if longer_rate > shorter_rate:
                    raise ValueError(
                        f"{tier.value}/{longer.value} rate ({longer_rate}) must not exceed "
                        f"{tier.value}/{shorter.value} rate ({shorter_rate})"
                    )

        for plan_type in PLAN_COMMITMENT_ORDER:
            community = self.plans.get((Tier.COMMUNITY, plan_type))
            top = self.plans.get((Tier.TOP, plan_type))
            if community and top and top.commission_rate > community.commission_rate:
                raise ValueError(
                    f"top/{plan_type.value} rate ({top.commission_rate}) must not exceed "
                    f"community/{plan_type.value} rate ({community.commission_rate})"
                )

        # Each step of the chain must be strictly cheaper than the one before it.
        steps = [
            [(tier, plan_type) for plan_type in plan_types if (tier, plan_type) in self.plans]
            for tier, plan_types in RATE_CHAIN
        ]
        steps = [step for step in steps if step]
        for pricier, cheaper in zip(steps, steps[1:]):
            low = min(pricier, key=lambda key: self.plans[key].commission_rate)
            high = max(cheaper, key=lambda key: self.plans[key].commission_rate)
            if self.plans[high].commission_rate >= self.plans[low].commission_rate:
                raise ValueError(
                    f"{high[0].value}/{high[1].value} rate ({self.plans[high].commission_rate}) must be "
                    f"lower than {low[0].value}/{low[1].value} rate ({self.plans[low].commission_rate})"
                )

    @classmethod
    def from_dict(cls, data: dict) -> "PricingConfig":
        plans = [PlanPricing.from_dict(p) for p in data["plans"]]
        thresholds = {
            Tier(tier): EligibilityThreshold.from_dict(threshold)
            for tier, threshold in data.get("thresholds", {}).items()
        }
        return cls(
            plans={(p.tier, p.plan_type): p for p in plans},
            thresholds=thresholds,
        )


def _plan(tier, plan_type, rate, monthly_fee=0, annual_fee=None) -> PlanPricing:
    return PlanPricing(
        tier=tier,
        plan_type=plan_type,
        commission_rate=rate,
        monthly_fee=monthly_fee,
        annual_fee=annual_fee,
    )


DEFAULT_PLANS = (
    _plan(Tier.COMMUNITY, PlanType.COMMISSION, 2000),
    _plan(Tier.COMMUNITY, PlanType.MONTHLY, 1200, monthly_fee=4900),
    _plan(Tier.COMMUNITY, PlanType.ANNUAL, 1200, annual_fee=49000),
    _plan(Tier.TOP, PlanType.COMMISSION, 1000),
    _plan(Tier.TOP, PlanType.MONTHLY, 800, monthly_fee=15500),
    _plan(Tier.TOP, PlanType.ANNUAL, 800, annual_fee=149000),
)

DEFAULT_THRESHOLDS = {
    Tier.COMMUNITY: EligibilityThreshold(
        min_months_active=3,
        min_avg_monthly_revenue=51000,
        min_completed_appointments=15,
        min_rating=Decimal("4.0"),
    ),
    Tier.TOP: EligibilityThreshold(
        min_months_active=3,
        min_avg_monthly_revenue=177400,
        min_completed_appointments=50,
        min_rating=Decimal("4.5"),
    ),
}

DEFAULT_PRICING = PricingConfig(
    plans={(p.tier, p.plan_type): p for p in DEFAULT_PLANS},
    thresholds=DEFAULT_THRESHOLDS,
)


def load_pricing(path: str | None = None) -> PricingConfig:
    """
    Load pricing from a JSON file.

    Falls back to PRICING_CONFIG_PATH, then to DEFAULT_PRICING when neither
    is set.
    """
    path = path or os.environ.get(PRICING_CONFIG_ENV)
    if not path:
        return DEFAULT_PRICING

    logger.info(f"Loading pricing configuration from {path}")
    with open(path, encoding="utf-8") as fh:
        return PricingConfig.from_dict(json.load(fh))
