"""
Eligibility Evaluator

Decides whether an expert's trailing metrics qualify them to be offered a
subscription plan, and projects the yearly savings used to message the offer.

Eligibility Criteria (all must hold):
- months_active            >= min_months_active
- average_monthly_revenue  >= min_avg_monthly_revenue
- completed_bookings_count >= min_completed_appointments
- average_rating           >= min_rating

This never changes an expert's plan; upgrading is a separate billing action
that uses this evaluation as a precondition.
"""

from decimal import ROUND_CEILING, ROUND_HALF_EVEN, Decimal

from ..errors import EngineError
from ..models import (
    BASIS_POINTS,
    EligibilityMetrics,
    EligibilityResult,
    EligibilityThreshold,
    PlanType,
    SavingsProjection,
    Tier,
)
from .commission import apply_rate
from .rates import RateResolver

MONTHS_PER_YEAR = 12


def _fmt_money(cents: int) -> str:
    return f"{Decimal(cents) / 100:,.2f}"


class EligibilityEvaluator:
    """Evaluates plan-upgrade eligibility and projected savings."""

    def __init__(self, rate_resolver: RateResolver):
        self.rate_resolver = rate_resolver

    def evaluate(
        self,
        tier: Tier,
        metrics: EligibilityMetrics,
        threshold: EligibilityThreshold,
        current_plan: PlanType,
        alternate_plan: PlanType = PlanType.ANNUAL,
    ) -> EligibilityResult | EngineError:
        meets = {
            "months_active": metrics.months_active >= threshold.min_months_active,
            "average_monthly_revenue": metrics.average_monthly_revenue >= threshold.min_avg_monthly_revenue,
            "completed_bookings_count": metrics.completed_bookings_count >= threshold.min_completed_appointments,
            "average_rating": metrics.average_rating >= threshold.min_rating,
        }
        failed = self._failed_criteria(meets, metrics, threshold)

        if failed:
            return EligibilityResult(
                eligible=False,
                tier=tier,
                current_plan=current_plan,
                metrics=metrics,
                requirements=threshold,
                meets_requirements=meets,
                failed_criteria=failed,
            )

        savings = self.project_savings(tier, metrics, current_plan, alternate_plan)
        if isinstance(savings, EngineError):
            return savings

        return EligibilityResult(
            eligible=True,
            tier=tier,
            current_plan=current_plan,
            metrics=metrics,
            requirements=threshold,
            meets_requirements=meets,
            savings=savings,
        )

    def project_savings(
        self,
        tier: Tier,
        metrics: EligibilityMetrics,
        current_plan: PlanType,
        alternate_plan: PlanType,
    ) -> SavingsProjection | EngineError:
        """
        Compare a year on the current plan with a year on the alternate plan.

        Alternate cost = the plan's fixed yearly fee + commissions at its
        reduced rate. The savings percentage is relative to the commissions
        paid at the current rate, and 0 when those are zero.
        """
        current_rate = self.rate_resolver.resolve(tier, current_plan)
        if isinstance(current_rate, EngineError):
            return current_rate

        alternate = self.rate_resolver.pricing.plan(tier, alternate_plan)
        if alternate is None:
            # Goes through the resolver so the failure is logged.
            return self.rate_resolver.resolve(tier, alternate_plan)

        annual_revenue = metrics.average_monthly_revenue * MONTHS_PER_YEAR
        current_commissions = apply_rate(annual_revenue, current_rate)
        alternate_commissions = apply_rate(annual_revenue, alternate.commission_rate)
        alternate_fee = alternate.yearly_fee
        savings = current_commissions - (alternate_fee + alternate_commissions)

        if current_commissions > 0:
            percentage = (Decimal(savings) * 100 / Decimal(current_commissions)).quantize(
                Decimal("0.01"), rounding=ROUND_HALF_EVEN
            )
        else:
            percentage = Decimal("0.00")

        return SavingsProjection(
            alternate_plan=alternate_plan,
            projected_annual_revenue=annual_revenue,
            projected_annual_commissions_at_current_rate=current_commissions,
            projected_annual_fee_at_alternate_plan=alternate_fee,
            projected_annual_commissions_at_alternate_rate=alternate_commissions,
            projected_savings=savings,
            savings_percentage=percentage,
            break_even_monthly_revenue=self._break_even(
                alternate_fee, current_rate, alternate.commission_rate
            ),
        )

    def _break_even(self, yearly_fee: int, current_rate: int, alternate_rate: int) -> int | None:
        """Monthly revenue at which the rate reduction pays for the yearly fee."""
        rate_delta = current_rate - alternate_rate
        if rate_delta <= 0:
            return None
        monthly = Decimal(yearly_fee * BASIS_POINTS) / Decimal(MONTHS_PER_YEAR * rate_delta)
        return int(monthly.quantize(Decimal("1"), rounding=ROUND_CEILING))

    def _failed_criteria(
        self,
        meets: dict,
        metrics: EligibilityMetrics,
        threshold: EligibilityThreshold,
    ) -> list[str]:
        failed = []
        if not meets["months_active"]:
            failed.append(
                f"Need {threshold.min_months_active} months active (have {metrics.months_active})"
            )
        if not meets["average_monthly_revenue"]:
            failed.append(
                f"Need {_fmt_money(threshold.min_avg_monthly_revenue)}/month avg revenue "
                f"(have {_fmt_money(metrics.average_monthly_revenue)})"
            )
        if not meets["completed_bookings_count"]:
            failed.append(
                f"Need {threshold.min_completed_appointments} completed appointments "
                f"(have {metrics.completed_bookings_count})"
            )
        if not meets["average_rating"]:
            failed.append(f"Need {threshold.min_rating}+ rating (have {metrics.average_rating})")
        return failed
