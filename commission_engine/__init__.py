"""
ELEVA COMMISSION ENGINE

Commission split, payee-protection invariants and plan eligibility for
expert bookings.
"""

from .errors import EngineError, EngineFailure
from .models import (
    ActorPlan,
    Booking,
    CommissionBreakdown,
    EligibilityMetrics,
    EligibilityThreshold,
    OrganizationFeeConfig,
    PlanType,
    Tier,
)
from .pricing import DEFAULT_PRICING, PricingConfig, load_pricing
from .processor import (
    CommissionProcessor,
    CommissionResult,
    EligibilityOutcome,
    ValidationResult,
    compute_commission,
    evaluate_eligibility,
    validate_organization_fee_change,
)

__all__ = [
    'CommissionProcessor',
    'compute_commission',
    'validate_organization_fee_change',
    'evaluate_eligibility',
    'CommissionResult',
    'ValidationResult',
    'EligibilityOutcome',
    'Booking',
    'ActorPlan',
    'OrganizationFeeConfig',
    'CommissionBreakdown',
    'EligibilityMetrics',
    'EligibilityThreshold',
    'Tier',
    'PlanType',
    'PricingConfig',
    'DEFAULT_PRICING',
    'load_pricing',
    'EngineError',
    'EngineFailure',
]
