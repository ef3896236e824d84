"""
Validation for the Eleva Commission Engine

InputValidator checks the shape of caller-supplied data before processing.
Structural problems (a booking naming an organization without its config,
negative amounts) are caller bugs and raise ValueError. Malformed eligibility
metrics come back as an InvalidMetricsInput value.

InvariantValidator enforces the protection rules on a computed breakdown and
on organization fee changes. Violations are returned, never raised, and are
never clamped.
"""

from decimal import Decimal

from .errors import (
    CombinedFeeExceedsMaximum,
    EngineError,
    InvalidMetricsInput,
    MarketingFeeOutOfRange,
    NegativePayeeShare,
    PayeeShareBelowMinimum,
)
from .models import BASIS_POINTS, Booking, CommissionBreakdown, EligibilityMetrics, OrganizationFeeConfig

MAX_RATING = Decimal("5")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class InputValidator:
    """Validates engine inputs according to business rules."""

    def validate_booking(self, booking: Booking, org_config: OrganizationFeeConfig | None) -> None:
        """Raises ValueError if the booking cannot be processed."""
        if not _is_int(booking.gross_amount):
            raise ValueError(
                f"gross_amount must be an integer amount in minor units, got: {booking.gross_amount!r}"
            )

        if booking.gross_amount < 0:
            raise ValueError(f"gross_amount cannot be negative, got: {booking.gross_amount}")

        if len(booking.currency) != 3 or not booking.currency.isalpha():
            raise ValueError(f"currency must be a 3-letter ISO code, got: {booking.currency!r}")

        if not booking.payee_id:
            raise ValueError("payee_id is required")

        if booking.has_organization:
            if org_config is None:
                raise ValueError(
                    f"organization config is required for bookings owned by organization "
                    f"{booking.organization_id}"
                )
            if org_config.organization_id != booking.organization_id:
                raise ValueError(
                    f"organization config {org_config.organization_id} does not match "
                    f"booking organization {booking.organization_id}"
                )
            self.validate_org_config(org_config)

    def validate_org_config(self, org_config: OrganizationFeeConfig) -> None:
        """Raises ValueError if the organization's bounds are inconsistent."""
        for name in (
            "marketing_fee_rate",
            "expert_minimum_share",
            "combined_fee_maximum",
            "marketing_fee_floor",
            "marketing_fee_ceiling",
        ):
            value = getattr(org_config, name)
            if not _is_int(value):
                raise ValueError(f"{name} must be an integer number of basis points, got: {value!r}")
            if not (0 <= value <= BASIS_POINTS):
                raise ValueError(f"{name} must be between 0 and {BASIS_POINTS} basis points, got: {value}")

        if org_config.marketing_fee_floor > org_config.marketing_fee_ceiling:
            raise ValueError(
                f"marketing_fee_floor ({org_config.marketing_fee_floor}) cannot exceed "
                f"marketing_fee_ceiling ({org_config.marketing_fee_ceiling})"
            )

    def validate_metrics(self, metrics: EligibilityMetrics) -> InvalidMetricsInput | None:
        """Return the first problem found in the metrics, or None."""
        for name in ("average_monthly_revenue", "completed_bookings_count", "months_active"):
            value = getattr(metrics, name)
            if not _is_int(value):
                return InvalidMetricsInput(field=name, reason=f"must be an integer, got {value!r}")
            if value < 0:
                return InvalidMetricsInput(field=name, reason=f"cannot be negative, got {value}")

        rating = metrics.average_rating
        if not isinstance(rating, Decimal) or not rating.is_finite():
            return InvalidMetricsInput(field="average_rating", reason=f"must be a number, got {rating!r}")
        if not (0 <= rating <= MAX_RATING):
            return InvalidMetricsInput(
                field="average_rating", reason=f"must be between 0 and {MAX_RATING}, got {rating}"
            )

        return None


class InvariantValidator:
    """Enforces payee-protection rules."""

    def check(
        self,
        breakdown: CommissionBreakdown,
        org_config: OrganizationFeeConfig | None = None,
    ) -> list[EngineError]:
        """
        Check a draft breakdown. Returns every violation, in check order.

        1. payee_net_amount >= 0 (stops here if violated)
        2. payee share >= expert_minimum_share        (organization only)
        3. platform + organization rate <= maximum    (organization only)
        """
        if breakdown.payee_net_amount < 0:
            return [
                NegativePayeeShare(
                    gross_amount=breakdown.gross_amount,
                    payee_net_amount=breakdown.payee_net_amount,
                )
            ]

        if not breakdown.has_organization or org_config is None:
            return []

        violations: list[EngineError] = []
        gross = breakdown.gross_amount

        # Cross-multiplied so the share comparison stays in integers.
        if gross > 0 and breakdown.payee_net_amount * BASIS_POINTS < org_config.expert_minimum_share * gross:
            violations.append(
                PayeeShareBelowMinimum(
                    actual=breakdown.payee_net_amount * BASIS_POINTS // gross,
                    required=org_config.expert_minimum_share,
                    payee_id=breakdown.payee_id,
                )
            )

        combined = breakdown.combined_fee_rate
        if combined > org_config.combined_fee_maximum:
            violations.append(
                CombinedFeeExceedsMaximum(
                    actual=combined,
                    maximum=org_config.combined_fee_maximum,
                    payee_id=breakdown.payee_id,
                )
            )

        return violations

    def check_fee_change(
        self,
        org_config: OrganizationFeeConfig,
        platform_rates: list[tuple[str | None, int]],
    ) -> list[EngineError]:
        """
        Check a proposed marketing fee against every associated payee.

        ``platform_rates`` holds (payee_id, platform_rate) for each payee.
        Rules 2 and 3 are applied at rate level: the payee keeps
        10000 - platform_rate - marketing_fee_rate basis points.
        """
        violations: list[EngineError] = []
        marketing = org_config.marketing_fee_rate

        if not (org_config.marketing_fee_floor <= marketing <= org_config.marketing_fee_ceiling):
            violations.append(
                MarketingFeeOutOfRange(
                    actual=marketing,
                    minimum=org_config.marketing_fee_floor,
                    maximum=org_config.marketing_fee_ceiling,
                )
            )

        for payee_id, platform_rate in platform_rates:
            combined = platform_rate + marketing
            payee_share = BASIS_POINTS - combined
            if payee_share < org_config.expert_minimum_share:
                violations.append(
                    PayeeShareBelowMinimum(
                        actual=payee_share,
                        required=org_config.expert_minimum_share,
                        payee_id=payee_id,
                    )
                )
            if combined > org_config.combined_fee_maximum:
                violations.append(
                    CombinedFeeExceedsMaximum(
                        actual=combined,
                        maximum=org_config.combined_fee_maximum,
                        payee_id=payee_id,
                    )
                )

        return violations
