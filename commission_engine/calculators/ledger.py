"""
Ledger Helpers

Breakdowns are historical records and are never edited. A refund is booked
as a compensating reversal, and reporting sums charges and reversals
together.
"""

from dataclasses import replace
from typing import Iterable

from ..models import BreakdownKind, CommissionBreakdown, CommissionSummary


class LedgerBuilder:
    """Builds reversals and summaries over recorded breakdowns."""

    def build_reversal(self, breakdown: CommissionBreakdown) -> CommissionBreakdown:
        """Return a reversal that cancels ``breakdown`` when summed with it."""
        if breakdown.kind is BreakdownKind.REVERSAL:
            raise ValueError("Cannot reverse a reversal; record a new charge instead")

        return replace(
            breakdown,
            gross_amount=-breakdown.gross_amount,
            platform_fee_amount=-breakdown.platform_fee_amount,
            organization_fee_amount=-breakdown.organization_fee_amount,
            payee_net_amount=-breakdown.payee_net_amount,
            kind=BreakdownKind.REVERSAL,
        )

    def summarize(self, breakdowns: Iterable[CommissionBreakdown]) -> CommissionSummary:
        """
        Total a set of breakdowns.

        Reversals are netted in and do not count as transactions. All
        breakdowns must share one currency.
        """
        currency = None
        count = gross = platform = organization = payee = 0

        for b in breakdowns:
            if currency is None:
                currency = b.currency
            elif b.currency != currency:
                raise ValueError(f"Cannot summarize mixed currencies: {currency} and {b.currency}")

            if b.kind is BreakdownKind.CHARGE:
                count += 1
            gross += b.gross_amount
            platform += b.platform_fee_amount
            organization += b.organization_fee_amount
            payee += b.payee_net_amount

        return CommissionSummary(
            currency=currency,
            transaction_count=count,
            total_gross=gross,
            total_platform_fees=platform,
            total_organization_fees=organization,
            total_payee_net=payee,
        )
