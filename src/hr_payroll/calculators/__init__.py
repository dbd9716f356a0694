"""Payroll calculation core."""

from hr_payroll.calculators.structure import SalaryStructureApplier, default_breakdown
from hr_payroll.calculators.totals import TotalsCalculator
from hr_payroll.calculators.types import PayrollTotals, SalaryBreakdown, StructureRules

__all__ = [
    "TotalsCalculator",
    "SalaryStructureApplier",
    "default_breakdown",
    "PayrollTotals",
    "SalaryBreakdown",
    "StructureRules",
]
