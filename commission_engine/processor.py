"""
Commission Processor - Main Orchestrator

Coordinates the engine's stages and exposes the three public operations:

    compute_commission               Booking -> CommissionBreakdown | rejection
    validate_organization_fee_change Org fee update -> ok | rejection
    evaluate_eligibility             Trailing metrics -> EligibilityResult

Everything here is pure and synchronous. Callers fetch a consistent snapshot
of the organization config and pricing once per call and pass it in; the
engine never reads shared state.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping

from .calculators import CommissionCalculator, EligibilityEvaluator, LedgerBuilder, RateResolver
from .errors import EngineError, EngineFailure
from .models import (
    ActorPlan,
    Booking,
    CommissionBreakdown,
    CommissionSummary,
    EligibilityMetrics,
    EligibilityResult,
    EligibilityThreshold,
    OrganizationFeeConfig,
    PlanType,
    Tier,
)
from .output import OutputBuilder
from .pricing import DEFAULT_PRICING, PricingConfig
from .validators import InputValidator, InvariantValidator

logger = logging.getLogger(__name__)


# =============================================================================
# RESULTS
# =============================================================================


class _Outcome:
    violations: tuple

    @property
    def ok(self) -> bool:
        return not self.violations

    @property
    def error(self) -> EngineError | None:
        """First violation in check order, or None."""
        return self.violations[0] if self.violations else None

    def _raise_if_failed(self) -> None:
        if self.violations:
            raise EngineFailure(self.violations[0], self.violations)


@dataclass(frozen=True)
class CommissionResult(_Outcome):
    """Either a validated breakdown or the violations that blocked it."""

    breakdown: CommissionBreakdown | None = None
    violations: tuple = ()

    def unwrap(self) -> CommissionBreakdown:
        self._raise_if_failed()
        return self.breakdown


@dataclass(frozen=True)
class ValidationResult(_Outcome):
    """Outcome of an all-or-nothing organization fee change check."""

    violations: tuple = ()

    def unwrap(self) -> None:
        self._raise_if_failed()


@dataclass(frozen=True)
class EligibilityOutcome(_Outcome):
    result: EligibilityResult | None = None
    violations: tuple = ()

    def unwrap(self) -> EligibilityResult:
        self._raise_if_failed()
        return self.result


# =============================================================================
# PROCESSOR
# =============================================================================


class CommissionProcessor:
    """
    Main orchestrator for commission processing.

    Pipeline for a booking:
    1. Validate input
    2. Resolve rates
    3. Compute the fee split
    4. Validate invariants
    """

    def __init__(self, pricing: PricingConfig | None = None):
        self.pricing = pricing or DEFAULT_PRICING
        self.input_validator = InputValidator()
        self.rate_resolver = RateResolver(self.pricing)
        self.commission_calculator = CommissionCalculator(self.rate_resolver)
        self.invariant_validator = InvariantValidator()
        self.eligibility_evaluator = EligibilityEvaluator(self.rate_resolver)
        self.ledger = LedgerBuilder()
        self.output_builder = OutputBuilder()

    def compute_commission(
        self,
        booking: Booking,
        actor_plan: ActorPlan,
        org_config: OrganizationFeeConfig | None = None,
    ) -> CommissionResult:
        """
        Compute and validate the split for one booking.

        Raises ValueError only for structurally invalid input; business-rule
        violations come back inside the result.
        """
        # Step 1: Validate
        self.input_validator.validate_booking(booking, org_config)
        if not booking.has_organization:
            org_config = None

        # Steps 2-3: Resolve rates and compute
        draft = self.commission_calculator.calculate(booking, actor_plan, org_config)
        if isinstance(draft, EngineError):
            return CommissionResult(violations=(draft,))

        # Step 4: Invariants
        violations = self.invariant_validator.check(draft, org_config)
        if violations:
            logger.warning(
                f"Commission rejected for payee {booking.payee_id}: "
                + "; ".join(v.message() for v in violations)
            )
            return CommissionResult(violations=tuple(violations))

        return CommissionResult(breakdown=draft)

    def validate_fee_change(
        self,
        org_config: OrganizationFeeConfig,
        actor_plans: Iterable[ActorPlan],
    ) -> ValidationResult:
        """
        Check a proposed marketing fee against every associated expert.

        The change is rejected as a whole if any single expert would be
        pushed below the minimum share or above the combined maximum.
        """
        self.input_validator.validate_org_config(org_config)

        platform_rates = []
        for plan in actor_plans:
            rate = self.rate_resolver.resolve(plan.tier, plan.plan_type)
            if isinstance(rate, EngineError):
                return ValidationResult(violations=(rate,))
            platform_rates.append((plan.payee_id, rate))

        violations = self.invariant_validator.check_fee_change(org_config, platform_rates)
        if violations:
            logger.warning(
                f"Marketing fee change rejected for organization {org_config.organization_id}: "
                f"{len(violations)} violation(s)"
            )
        return ValidationResult(violations=tuple(violations))

    def evaluate_eligibility(
        self,
        tier: Tier,
        metrics: EligibilityMetrics,
        thresholds: EligibilityThreshold | Mapping[Tier, EligibilityThreshold] | None = None,
        current_plan: PlanType = PlanType.COMMISSION,
        alternate_plan: PlanType = PlanType.ANNUAL,
    ) -> EligibilityOutcome:
        """
        Evaluate plan-upgrade eligibility.

        ``thresholds`` may be a single threshold, a per-tier table, or None to
        use the pricing config's table.
        """
        invalid = self.input_validator.validate_metrics(metrics)
        if invalid is not None:
            return EligibilityOutcome(violations=(invalid,))

        threshold = self._resolve_threshold(tier, thresholds)
        result = self.eligibility_evaluator.evaluate(tier, metrics, threshold, current_plan, alternate_plan)
        if isinstance(result, EngineError):
            return EligibilityOutcome(violations=(result,))
        return EligibilityOutcome(result=result)

    def build_reversal(self, breakdown: CommissionBreakdown) -> CommissionBreakdown:
        return self.ledger.build_reversal(breakdown)

    def summarize(self, breakdowns: Iterable[CommissionBreakdown]) -> CommissionSummary:
        return self.ledger.summarize(breakdowns)

    # -------------------------------------------------------------------------
    # Raw dictionary API (used by the HTTP layers)
    # -------------------------------------------------------------------------

    def compute_commission_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a booking from raw dictionary input.

        Expects {"booking": {...}, "actor_plan": {...}, "organization": {...}?}.
        """
        booking = Booking.from_dict(data["booking"])
        actor_plan = ActorPlan.from_dict(data["actor_plan"])
        org_data = data.get("organization")
        org_config = OrganizationFeeConfig.from_dict(org_data) if org_data else None

        result = self.compute_commission(booking, actor_plan, org_config)
        if not result.ok:
            return self.output_builder.build_rejection(result.violations)
        return self.output_builder.build_breakdown(result.breakdown)

    def validate_fee_change_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Expects {"organization": {...}, "actor_plans": [{...}, ...]}."""
        org_config = OrganizationFeeConfig.from_dict(data["organization"])
        actor_plans = [ActorPlan.from_dict(p) for p in data.get("actor_plans", [])]

        result = self.validate_fee_change(org_config, actor_plans)
        if not result.ok:
            return self.output_builder.build_rejection(result.violations)
        return self.output_builder.build_fee_change(
            org_config.organization_id, org_config.marketing_fee_rate, len(actor_plans)
        )

    def evaluate_eligibility_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Expects {"tier", "metrics": {...}, "current_plan"?, "alternate_plan"?,
        "threshold": {...}?}.
        """
        tier = Tier(data["tier"])
        metrics = EligibilityMetrics.from_dict(data["metrics"])
        threshold_data = data.get("threshold")
        threshold = EligibilityThreshold.from_dict(threshold_data) if threshold_data else None

        outcome = self.evaluate_eligibility(
            tier,
            metrics,
            threshold,
            current_plan=PlanType(data.get("current_plan", PlanType.COMMISSION.value)),
            alternate_plan=PlanType(data.get("alternate_plan", PlanType.ANNUAL.value)),
        )
        if not outcome.ok:
            return self.output_builder.build_error(outcome.error)
        return self.output_builder.build_eligibility(outcome.result)

    def _resolve_threshold(self, tier: Tier, thresholds) -> EligibilityThreshold:
        if isinstance(thresholds, EligibilityThreshold):
            return thresholds
        if thresholds is None:
            threshold = self.pricing.threshold(tier)
        else:
            threshold = thresholds.get(tier)
        if threshold is None:
            raise ValueError(f"No eligibility threshold configured for tier: {tier.value}")
        return threshold


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def compute_commission(
    booking: Booking,
    actor_plan: ActorPlan,
    org_config: OrganizationFeeConfig | None = None,
    pricing: PricingConfig = DEFAULT_PRICING,
) -> CommissionResult:
    return CommissionProcessor(pricing).compute_commission(booking, actor_plan, org_config)


def validate_organization_fee_change(
    org_config: OrganizationFeeConfig,
    actor_plans: Iterable[ActorPlan],
    pricing: PricingConfig = DEFAULT_PRICING,
) -> ValidationResult:
    return CommissionProcessor(pricing).validate_fee_change(org_config, actor_plans)


def evaluate_eligibility(
    tier: Tier,
    metrics: EligibilityMetrics,
    thresholds: EligibilityThreshold | Mapping[Tier, EligibilityThreshold] | None = None,
    current_plan: PlanType = PlanType.COMMISSION,
    pricing: PricingConfig = DEFAULT_PRICING,
    alternate_plan: PlanType = PlanType.ANNUAL,
) -> EligibilityOutcome:
    return CommissionProcessor(pricing).evaluate_eligibility(
        tier, metrics, thresholds, current_plan, alternate_plan
    )
