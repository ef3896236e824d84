"""
Domain Models for the Eleva Commission Engine

These dataclasses provide type-safe representations of all business entities.
Money is always an int in minor currency units (cents) and rates are int
basis points (1200 = 12.00%). Inputs are frozen: the engine reads them once
and never mutates them.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

BASIS_POINTS = 10000


class Tier(str, Enum):
    """Performance tier of an expert."""

    COMMUNITY = "community"
    TOP = "top"


class PlanType(str, Enum):
    """How an expert pays the platform."""

    COMMISSION = "commission"
    MONTHLY = "monthly"
    ANNUAL = "annual"


class BreakdownKind(str, Enum):
    CHARGE = "charge"
    REVERSAL = "reversal"


def parse_money(value, name: str) -> int:
    """Parse a minor-unit amount, rejecting floats and fractional values."""
    if isinstance(value, bool) or not isinstance(value, (int, str, Decimal)):
        raise ValueError(f"{name} must be an integer amount in minor units, got: {value!r}")
    try:
        parsed = Decimal(str(value))
    except ArithmeticError:
        raise ValueError(f"{name} must be an integer amount in minor units, got: {value!r}") from None
    if parsed != parsed.to_integral_value():
        raise ValueError(f"{name} must be a whole number of minor units, got: {value!r}")
    return int(parsed)


def parse_rate(value, name: str, maximum: int = BASIS_POINTS) -> int:
    """Parse a rate given in basis points (int) into an int."""
    rate = parse_money(value, name)
    if not (0 <= rate <= maximum):
        raise ValueError(f"{name} must be between 0 and {maximum} basis points, got: {rate}")
    return rate


def parse_count(value, name: str) -> int:
    """Parse a non-negative whole count, rejecting floats and fractions."""
    count = parse_money(value, name)
    if count < 0:
        raise ValueError(f"{name} cannot be negative, got: {count}")
    return count


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class Booking:
    """A captured payment for one booking."""

    gross_amount: int
    currency: str
    payee_id: str
    organization_id: str | None = None
    booking_id: str | None = None

    @property
    def has_organization(self) -> bool:
        return self.organization_id is not None

    @classmethod
    def from_dict(cls, data: dict) -> "Booking":
        return cls(
            gross_amount=parse_money(data["gross_amount"], "gross_amount"),
            currency=str(data["currency"]).upper(),
            payee_id=str(data["payee_id"]),
            organization_id=data.get("organization_id"),
            booking_id=data.get("booking_id"),
        )


@dataclass(frozen=True)
class ActorPlan:
    """Tier and plan type of an expert at computation time."""

    tier: Tier
    plan_type: PlanType
    payee_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "ActorPlan":
        return cls(
            tier=Tier(data["tier"]),
            plan_type=PlanType(data["plan_type"]),
            payee_id=data.get("payee_id"),
        )


@dataclass(frozen=True)
class OrganizationFeeConfig:
    """Marketing fee and protection bounds of an owning organization."""

    organization_id: str
    marketing_fee_rate: int
    expert_minimum_share: int = 6000
    combined_fee_maximum: int = 4000
    marketing_fee_floor: int = 1000
    marketing_fee_ceiling: int = 2500

    @classmethod
    def from_dict(cls, data: dict) -> "OrganizationFeeConfig":
        return cls(
            organization_id=str(data["organization_id"]),
            marketing_fee_rate=parse_rate(data["marketing_fee_rate"], "marketing_fee_rate"),
            expert_minimum_share=parse_rate(data.get("expert_minimum_share", 6000), "expert_minimum_share"),
            combined_fee_maximum=parse_rate(data.get("combined_fee_maximum", 4000), "combined_fee_maximum"),
            marketing_fee_floor=parse_rate(data.get("marketing_fee_floor", 1000), "marketing_fee_floor"),
            marketing_fee_ceiling=parse_rate(data.get("marketing_fee_ceiling", 2500), "marketing_fee_ceiling"),
        )


@dataclass(frozen=True)
class EligibilityMetrics:
    """Trailing performance aggregates (usually the last 90 days)."""

    average_monthly_revenue: int
    completed_bookings_count: int
    average_rating: Decimal
    months_active: int

    @classmethod
    def from_dict(cls, data: dict) -> "EligibilityMetrics":
        # Values are checked by InputValidator so malformed input can be
        # reported as InvalidMetricsInput instead of a parse failure.
        return cls(
            average_monthly_revenue=data["average_monthly_revenue"],
            completed_bookings_count=data["completed_bookings_count"],
            average_rating=_to_decimal(data["average_rating"]),
            months_active=data["months_active"],
        )


def _parse_rating(value) -> Decimal:
    rating = _to_decimal(value)
    if not isinstance(rating, Decimal) or not rating.is_finite():
        raise ValueError(f"min_rating must be a number, got: {value!r}")
    return rating


def _to_decimal(value):
    """Best-effort Decimal conversion; unparseable values are returned as-is."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        return value
    try:
        return Decimal(str(value))
    except ArithmeticError:
        return value


@dataclass(frozen=True)
class EligibilityThreshold:
    """Minimum metrics an expert must meet to be offered a subscription plan."""

    min_months_active: int
    min_avg_monthly_revenue: int
    min_completed_appointments: int
    min_rating: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "EligibilityThreshold":
        return cls(
            min_months_active=parse_count(data["min_months_active"], "min_months_active"),
            min_avg_monthly_revenue=parse_money(data["min_avg_monthly_revenue"], "min_avg_monthly_revenue"),
            min_completed_appointments=parse_count(
                data["min_completed_appointments"], "min_completed_appointments"
            ),
            min_rating=_parse_rating(data["min_rating"]),
        )

    def to_dict(self) -> dict:
        return {
            "min_months_active": self.min_months_active,
            "min_avg_monthly_revenue": self.min_avg_monthly_revenue,
            "min_completed_appointments": self.min_completed_appointments,
            "min_rating": str(self.min_rating),
        }


@dataclass(frozen=True)
class PlanPricing:
    """Commission rate and subscription fees of one (tier, plan type) pair."""

    tier: Tier
    plan_type: PlanType
    commission_rate: int
    monthly_fee: int = 0
    annual_fee: int | None = None

    @property
    def yearly_fee(self) -> int:
        """Fixed cost of the plan over twelve months."""
        if self.annual_fee is not None:
            return self.annual_fee
        return self.monthly_fee * 12

    @classmethod
    def from_dict(cls, data: dict) -> "PlanPricing":
        annual = data.get("annual_fee")
        return cls(
            tier=Tier(data["tier"]),
            plan_type=PlanType(data["plan_type"]),
            commission_rate=parse_rate(data["commission_rate"], "commission_rate", maximum=BASIS_POINTS - 1),
            monthly_fee=parse_money(data.get("monthly_fee", 0), "monthly_fee"),
            annual_fee=parse_money(annual, "annual_fee") if annual is not None else None,
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class CommissionBreakdown:
    """
    Split of one booking between platform, organization and payee.

    Write-once: refunds are recorded as a separate reversal breakdown.
    """

    gross_amount: int
    currency: str
    payee_id: str
    tier: Tier
    plan_type: PlanType
    platform_fee_rate: int
    platform_fee_amount: int
    organization_fee_rate: int = 0
    organization_fee_amount: int = 0
    payee_net_amount: int = 0
    organization_id: str | None = None
    booking_id: str | None = None
    kind: BreakdownKind = BreakdownKind.CHARGE

    @property
    def has_organization(self) -> bool:
        return self.organization_id is not None

    @property
    def combined_fee_rate(self) -> int:
        return self.platform_fee_rate + self.organization_fee_rate

    @property
    def total_fees(self) -> int:
        return self.platform_fee_amount + self.organization_fee_amount


@dataclass(frozen=True)
class CommissionSummary:
    """Totals over a set of breakdowns in one currency."""

    currency: str | None
    transaction_count: int = 0
    total_gross: int = 0
    total_platform_fees: int = 0
    total_organization_fees: int = 0
    total_payee_net: int = 0


@dataclass(frozen=True)
class SavingsProjection:
    """Projected yearly cost of staying on the current plan versus switching."""

    alternate_plan: PlanType
    projected_annual_revenue: int
    projected_annual_commissions_at_current_rate: int
    projected_annual_fee_at_alternate_plan: int
    projected_annual_commissions_at_alternate_rate: int
    projected_savings: int
    savings_percentage: Decimal
    break_even_monthly_revenue: int | None


@dataclass(frozen=True)
class EligibilityResult:
    """Outcome of an eligibility evaluation.

    When ineligible, ``savings`` is None and the caller shows progress using
    ``metrics``, ``requirements`` and ``failed_criteria``.
    """

    eligible: bool
    tier: Tier
    current_plan: PlanType
    metrics: EligibilityMetrics
    requirements: EligibilityThreshold
    meets_requirements: dict = field(default_factory=dict)
    failed_criteria: list[str] = field(default_factory=list)
    savings: SavingsProjection | None = None
