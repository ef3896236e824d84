"""
Calculators Package

Provides all calculation components of the commission engine.
"""

from .commission import CommissionCalculator, apply_rate
from .eligibility import EligibilityEvaluator
from .ledger import LedgerBuilder
from .rates import RateResolver

__all__ = [
    "RateResolver",
    "CommissionCalculator",
    "EligibilityEvaluator",
    "LedgerBuilder",
    "apply_rate",
]
