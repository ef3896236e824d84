"""
Output Builder

Constructs JSON-ready responses from engine results. Amounts stay integers in
minor units; descriptions carry the human-readable arithmetic.
"""

from decimal import Decimal

from .errors import EngineError
from .models import CommissionBreakdown, CommissionSummary, EligibilityResult, SavingsProjection


def _fmt(cents: int, currency: str | None = None) -> str:
    """Format minor units as a currency string for descriptions."""
    amount = f"{Decimal(cents) / 100:,.2f}"
    return f"{currency} {amount}" if currency else amount


def _pct(basis_points: int) -> str:
    return f"{basis_points / 100:.2f}%"


class OutputBuilder:
    """Builds the final output responses."""

    def build_breakdown(self, breakdown: CommissionBreakdown) -> dict:
        """Construct the commission response with value/description pairs."""
        return {
            "status": "ok",
            "booking_summary": self._build_booking_summary(breakdown),
            "calculations": self._build_calculations(breakdown),
        }

    def build_rejection(self, violations) -> dict:
        violations = list(violations)
        return {
            "status": "rejected",
            "error": violations[0].to_dict(),
            "violations": [v.to_dict() for v in violations],
        }

    def build_fee_change(self, organization_id: str, marketing_fee_rate: int, actor_count: int) -> dict:
        return {
            "status": "ok",
            "organization_id": organization_id,
            "marketing_fee_rate": marketing_fee_rate,
            "actors_checked": actor_count,
        }

    def build_error(self, error: EngineError) -> dict:
        return self.build_rejection([error])

    def _build_booking_summary(self, b: CommissionBreakdown) -> dict:
        return {
            "booking_id": b.booking_id,
            "payee_id": b.payee_id,
            "organization_id": b.organization_id,
            "currency": b.currency,
            "tier": b.tier.value,
            "plan_type": b.plan_type.value,
            "kind": b.kind.value,
        }

    def _build_calculations(self, b: CommissionBreakdown) -> dict:
        gross = _fmt(b.gross_amount, b.currency)
        org_description = (
            f"{_pct(b.organization_fee_rate)} × {gross} = {_fmt(b.organization_fee_amount, b.currency)}"
            if b.has_organization
            else "No organization for this booking"
        )
        return {
            "gross_amount": {
                "value": b.gross_amount,
                "description": "Amount paid by the client for this booking",
            },
            "platform_fee_rate": {
                "value": b.platform_fee_rate,
                "description": f"{b.tier.value}/{b.plan_type.value} platform rate ({_pct(b.platform_fee_rate)})",
            },
            "platform_fee_amount": {
                "value": b.platform_fee_amount,
                "description": f"{_pct(b.platform_fee_rate)} × {gross} = {_fmt(b.platform_fee_amount, b.currency)}",
            },
            "organization_fee_rate": {
                "value": b.organization_fee_rate,
                "description": (
                    f"Marketing fee set by organization {b.organization_id} ({_pct(b.organization_fee_rate)})"
                    if b.has_organization
                    else "No organization for this booking"
                ),
            },
            "organization_fee_amount": {
                "value": b.organization_fee_amount,
                "description": org_description,
            },
            "payee_net_amount": {
                "value": b.payee_net_amount,
                "description": (
                    f"gross ({gross}) - platform ({_fmt(b.platform_fee_amount, b.currency)}) "
                    f"- organization ({_fmt(b.organization_fee_amount, b.currency)}) "
                    f"= {_fmt(b.payee_net_amount, b.currency)}"
                ),
            },
        }

    def build_summary(self, summary: CommissionSummary) -> dict:
        return {
            "currency": summary.currency,
            "transaction_count": summary.transaction_count,
            "total_gross": summary.total_gross,
            "total_platform_fees": summary.total_platform_fees,
            "total_organization_fees": summary.total_organization_fees,
            "total_payee_net": summary.total_payee_net,
        }

    def build_eligibility(self, result: EligibilityResult) -> dict:
        metrics = result.metrics
        output = {
            "status": "ok",
            "eligible": result.eligible,
            "tier": result.tier.value,
            "current_plan": result.current_plan.value,
            "metrics": {
                "months_active": metrics.months_active,
                "average_monthly_revenue": metrics.average_monthly_revenue,
                "completed_bookings_count": metrics.completed_bookings_count,
                "average_rating": str(metrics.average_rating),
            },
            "requirements": result.requirements.to_dict(),
            "meets_requirements": dict(result.meets_requirements),
        }
        if result.eligible:
            output["savings"] = self._build_savings(result.savings)
        else:
            output["failed_criteria"] = list(result.failed_criteria)
        return output

    def _build_savings(self, savings: SavingsProjection) -> dict:
        return {
            "alternate_plan": savings.alternate_plan.value,
            "projected_annual_revenue": savings.projected_annual_revenue,
            "projected_annual_commissions_at_current_rate": savings.projected_annual_commissions_at_current_rate,
            "projected_annual_fee_at_alternate_plan": savings.projected_annual_fee_at_alternate_plan,
            "projected_annual_commissions_at_alternate_rate": savings.projected_annual_commissions_at_alternate_rate,
            "projected_savings": savings.projected_savings,
            "savings_percentage": str(savings.savings_percentage),
            "break_even_monthly_revenue": savings.break_even_monthly_revenue,
        }
