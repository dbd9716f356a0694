"""Salary structure application.

Turns a structure's percentage/fixed rules and a base salary into concrete
earning and deduction amounts for one employee.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, Sequence

from hr_payroll.calculators.totals import TotalsCalculator
from hr_payroll.calculators.types import (
    ZERO,
    Amount,
    Applicability,
    BonusRule,
    DeductionField,
    EarningField,
    FieldRule,
    OvertimeRule,
    SalaryBreakdown,
    StructureRules,
    as_decimal,
)

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee

HUNDRED = Decimal("100")
WHOLE_UNIT = Decimal("1")


class SalaryStructureApplier:
    """Resolves structure rules against a base salary."""

    @staticmethod
    def resolve_rule(rule: FieldRule, base: Decimal) -> Decimal:
        """Percentage of base, or the fixed amount verbatim."""
        if rule.is_percentage:
            return base * rule.percentage / HUNDRED
        return rule.fixed_amount

    @staticmethod
    def resolve_bonus(rule: BonusRule, base: Decimal) -> Decimal | None:
        """Bonus amount, or None when the bonus is disabled.

        A max_amount of zero means the bonus is uncapped.
        """
        if not rule.enabled:
            return None
        amount = base * rule.percentage / HUNDRED
        if rule.max_amount > 0:
            amount = min(amount, rule.max_amount)
        return amount

    @staticmethod
    def overtime_pay(
        rule: OvertimeRule,
        hours: Amount,
        hourly_rate: Amount,
    ) -> Decimal | None:
        """Overtime pay for a month, capped at max_hours_per_month."""
        if not rule.enabled or hours is None or hourly_rate is None:
            return None
        capped = min(as_decimal(hours), rule.max_hours_per_month)
        return as_decimal(hourly_rate) * rule.rate * capped

    @staticmethod
    def apply(
        rules: StructureRules,
        base_salary: Amount,
        overtime_hours: Amount = None,
        hourly_rate: Amount = None,
    ) -> SalaryBreakdown:
        """Build the salary breakdown for a base salary."""
        base = as_decimal(base_salary)

        earnings: dict[str, Decimal] = {
            field.value: SalaryStructureApplier.resolve_rule(rule, base)
            for field, rule in rules.earnings.items()
        }
        deductions: dict[str, Decimal] = {
            field.value: SalaryStructureApplier.resolve_rule(rule, base)
            for field, rule in rules.deductions.items()
        }

        for field, bonus_rule in rules.bonuses.items():
            bonus = SalaryStructureApplier.resolve_bonus(bonus_rule, base)
            if bonus is not None:
                earnings[field.value] = bonus

        overtime = SalaryStructureApplier.overtime_pay(
            rules.overtime, overtime_hours, hourly_rate
        )
        if overtime is not None:
            earnings[EarningField.OVERTIME.value] = overtime

        return SalaryBreakdown(
            earnings=earnings,
            deductions=deductions,
            totals=TotalsCalculator.compute(earnings, deductions),
        )

    @staticmethod
    def is_applicable(
        applicable_to: str,
        applicable_values: Sequence[str],
        employee: Employee,
    ) -> bool:
        """Whether a structure's applicability covers the employee."""
        target = Applicability(applicable_to)
        if target == Applicability.ALL:
            return True
        if target == Applicability.DEPARTMENT:
            return employee.department in applicable_values
        if target == Applicability.POSITION:
            return employee.position in applicable_values
        return str(employee.role_level) in applicable_values


def _round_units(amount: Decimal) -> Decimal:
    return amount.quantize(WHOLE_UNIT, rounding=ROUND_HALF_UP)


def default_breakdown(basic_salary: Amount) -> SalaryBreakdown:
    """Breakdown used when a payroll is created without a structure.

    Percentages are of the basic salary and rounded half-up to whole units.
    Fields the template does not set are zero.
    """
    base = as_decimal(basic_salary)

    def pct(value: str) -> Decimal:
        return _round_units(base * Decimal(value) / HUNDRED)

    earnings = {field.value: ZERO for field in EarningField}
    earnings.update(
        {
            EarningField.BASIC_WAGE.value: base,
            EarningField.HOUSE_RENT_ALLOWANCE.value: pct("40"),
            EarningField.TRANSPORT_ALLOWANCE.value: Decimal("2000"),
            EarningField.MEDICAL_ALLOWANCE.value: Decimal("1500"),
            EarningField.PF_EMPLOYER.value: pct("12"),
            EarningField.ESI_EMPLOYER.value: pct("3.25"),
        }
    )
    deductions = {field.value: ZERO for field in DeductionField}
    deductions.update(
        {
            DeductionField.PF_EMPLOYEE.value: pct("12"),
            DeductionField.ESI_EMPLOYEE.value: pct("0.75"),
            DeductionField.PROFESSIONAL_TAX.value: Decimal("200"),
            DeductionField.INCOME_TAX.value: pct("10"),
        }
    )
    return SalaryBreakdown(
        earnings=earnings,
        deductions=deductions,
        totals=TotalsCalculator.compute(earnings, deductions),
    )
