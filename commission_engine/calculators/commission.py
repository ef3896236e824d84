"""
Commission Calculator

Splits a booking's gross amount between platform, organization and payee
using exact integer arithmetic.

Fee amounts are rounded down to the minor unit, so sub-cent residue always
stays with the payee. A fee never exceeds its exact rate share, which means a
booking whose rates pass the organization's bounds also passes them at amount
level. The payee's share is the remainder after the fees, which keeps

    platform_fee_amount + organization_fee_amount + payee_net_amount == gross_amount

exact for every input.
"""

from decimal import ROUND_FLOOR, Decimal

from ..errors import EngineError
from ..models import BASIS_POINTS, ActorPlan, Booking, CommissionBreakdown, OrganizationFeeConfig
from .rates import RateResolver


def apply_rate(amount: int, rate: int) -> int:
    """Apply a basis-point rate to a minor-unit amount, rounding down."""
    exact = Decimal(amount * rate) / Decimal(BASIS_POINTS)
    return int(exact.quantize(Decimal("1"), rounding=ROUND_FLOOR))


class CommissionCalculator:
    """Builds a draft CommissionBreakdown for one booking."""

    def __init__(self, rate_resolver: RateResolver):
        self.rate_resolver = rate_resolver

    def calculate(
        self,
        booking: Booking,
        actor_plan: ActorPlan,
        org_config: OrganizationFeeConfig | None = None,
    ) -> CommissionBreakdown | EngineError:
        """
        Calculate the fee split.

        Two-party (no organization on the booking): platform fee only.
        Three-party: platform fee plus the organization's marketing fee.
        The result is a draft; it still has to pass InvariantValidator.
        """
        platform_rate = self.rate_resolver.resolve(actor_plan.tier, actor_plan.plan_type)
        if isinstance(platform_rate, EngineError):
            return platform_rate

        gross = booking.gross_amount
        platform_fee = apply_rate(gross, platform_rate)

        if not booking.has_organization:
            return self._build(booking, actor_plan, platform_rate, platform_fee, 0, 0)

        org_rate = self.rate_resolver.resolve_organization_rate(org_config)
        org_fee = apply_rate(gross, org_rate)
        return self._build(booking, actor_plan, platform_rate, platform_fee, org_rate, org_fee)

    def _build(
        self,
        booking: Booking,
        actor_plan: ActorPlan,
        platform_rate: int,
        platform_fee: int,
        org_rate: int,
        org_fee: int,
    ) -> CommissionBreakdown:
        return CommissionBreakdown(
            gross_amount=booking.gross_amount,
            currency=booking.currency,
            payee_id=booking.payee_id,
            tier=actor_plan.tier,
            plan_type=actor_plan.plan_type,
            platform_fee_rate=platform_rate,
            platform_fee_amount=platform_fee,
            organization_fee_rate=org_rate,
            organization_fee_amount=org_fee,
            payee_net_amount=booking.gross_amount - platform_fee - org_fee,
            organization_id=booking.organization_id,
            booking_id=booking.booking_id,
        )
