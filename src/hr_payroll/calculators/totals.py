"""Payroll totals calculator."""

from __future__ import annotations

from typing import TYPE_CHECKING, Mapping

from hr_payroll.calculators.types import ZERO, Amount, PayrollTotals, as_decimal

if TYPE_CHECKING:
    from decimal import Decimal

    from hr_payroll.models.payroll import PayrollRecord


class TotalsCalculator:
    """Derives earnings total, deductions total and net pay.

    Arithmetic is exact Decimal with no rounding. Missing or None amounts
    count as zero and negative amounts are summed as given.
    """

    @staticmethod
    def sum_amounts(amounts: Mapping[str, Amount] | None) -> Decimal:
        """Sum every value in the mapping."""
        total = ZERO
        for value in (amounts or {}).values():
            total += as_decimal(value)
        return total

    @staticmethod
    def compute(
        earnings: Mapping[str, Amount] | None,
        deductions: Mapping[str, Amount] | None,
    ) -> PayrollTotals:
        """Compute totals for an earnings map and a deductions map."""
        earnings_total = TotalsCalculator.sum_amounts(earnings)
        deductions_total = TotalsCalculator.sum_amounts(deductions)
        return PayrollTotals(
            earnings_total=earnings_total,
            deductions_total=deductions_total,
            net_pay=earnings_total - deductions_total,
        )

    @staticmethod
    def apply_to_record(record: PayrollRecord) -> PayrollTotals:
        """Recompute and write the derived columns of a payroll record."""
        totals = TotalsCalculator.compute(record.earnings_map(), record.deductions_map())
        record.total_earnings = totals.earnings_total
        record.total_deductions = totals.deductions_total
        record.ctc = totals.ctc
        record.in_hand_salary = totals.in_hand_salary
        return totals
