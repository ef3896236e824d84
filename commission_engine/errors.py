"""
Error values for the Eleva Commission Engine

Every failure mode of the engine is a predictable outcome the caller must
branch on, so errors are returned as values inside result objects rather
than raised. ``EngineFailure`` exists for callers that prefer exceptions and
is only raised by ``unwrap()``.
"""

from dataclasses import asdict, dataclass
from typing import ClassVar


def _pct(basis_points: int) -> str:
    return f"{basis_points / 100:.2f}%"


@dataclass(frozen=True)
class EngineError:
    """Base class for all engine error values."""

    kind: ClassVar[str] = "engine_error"
    fatal: ClassVar[bool] = False

    def message(self) -> str:
        return self.kind

    def to_dict(self) -> dict:
        data = {"kind": self.kind, "message": self.message()}
        data.update(asdict(self))
        return data


@dataclass(frozen=True)
class UnknownPlanConfiguration(EngineError):
    """The (tier, plan type) pair has no entry in the rate table."""

    kind: ClassVar[str] = "unknown_plan_configuration"
    fatal: ClassVar[bool] = True

    tier: str
    plan_type: str

    def message(self) -> str:
        return f"No platform rate configured for tier={self.tier} plan_type={self.plan_type}"


@dataclass(frozen=True)
class NegativePayeeShare(EngineError):
    """Fees exceed the gross amount."""

    kind: ClassVar[str] = "negative_payee_share"
    fatal: ClassVar[bool] = True

    gross_amount: int
    payee_net_amount: int

    def message(self) -> str:
        return (
            f"Fees exceed gross amount: payee would receive {self.payee_net_amount} "
            f"of {self.gross_amount}"
        )


@dataclass(frozen=True)
class PayeeShareBelowMinimum(EngineError):
    """The payee would keep less than the organization's guaranteed share."""

    kind: ClassVar[str] = "payee_share_below_minimum"

    actual: int
    required: int
    payee_id: str | None = None

    def message(self) -> str:
        who = f" for payee {self.payee_id}" if self.payee_id else ""
        return f"Payee share {_pct(self.actual)} is below the required {_pct(self.required)}{who}"


@dataclass(frozen=True)
class CombinedFeeExceedsMaximum(EngineError):
    """Platform and organization fees together exceed the allowed maximum."""

    kind: ClassVar[str] = "combined_fee_exceeds_maximum"

    actual: int
    maximum: int
    payee_id: str | None = None

    def message(self) -> str:
        who = f" for payee {self.payee_id}" if self.payee_id else ""
        return f"Combined fee {_pct(self.actual)} exceeds the maximum {_pct(self.maximum)}{who}"


@dataclass(frozen=True)
class MarketingFeeOutOfRange(EngineError):
    """The organization tried to set a marketing fee outside its settable range."""

    kind: ClassVar[str] = "marketing_fee_out_of_range"

    actual: int
    minimum: int
    maximum: int

    def message(self) -> str:
        return (
            f"Marketing fee {_pct(self.actual)} must be between "
            f"{_pct(self.minimum)} and {_pct(self.maximum)}"
        )


@dataclass(frozen=True)
class InvalidMetricsInput(EngineError):
    """Eligibility metrics are malformed."""

    kind: ClassVar[str] = "invalid_metrics_input"

    field: str
    reason: str

    def message(self) -> str:
        return f"Invalid metrics input for {self.field}: {self.reason}"


class EngineFailure(ValueError):
    """Raised by ``unwrap()`` on a failed result."""

    def __init__(self, error: EngineError, violations: tuple = ()):
        super().__init__(error.message())
        self.error = error
        self.violations = violations or (error,)
