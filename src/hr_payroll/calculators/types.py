"""Type definitions for payroll calculation."""

from __future__ import annotations

import calendar
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping, Union

Amount = Union[Decimal, int, float, str, None]

ZERO = Decimal("0")


class EarningField(str, Enum):
    """Earning fields of a payroll record."""

    BASIC_WAGE = "basic_wage"
    HOUSE_RENT_ALLOWANCE = "house_rent_allowance"
    TRANSPORT_ALLOWANCE = "transport_allowance"
    MEDICAL_ALLOWANCE = "medical_allowance"
    OVERTIME = "overtime"
    GRATUITY = "gratuity"
    SPECIAL_ALLOWANCE = "special_allowance"
    PERFORMANCE_BONUS = "performance_bonus"
    PROJECT_BONUS = "project_bonus"
    ATTENDANCE_BONUS = "attendance_bonus"
    PF_EMPLOYER = "pf_employer"
    ESI_EMPLOYER = "esi_employer"


class DeductionField(str, Enum):
    """Deduction fields of a payroll record."""

    PF_EMPLOYEE = "pf_employee"
    ESI_EMPLOYEE = "esi_employee"
    PROFESSIONAL_TAX = "professional_tax"
    INCOME_TAX = "income_tax"
    ADVANCE_SALARY = "advance_salary"
    LOAN_DEDUCTION = "loan_deduction"
    OTHER_DEDUCTIONS = "other_deductions"


# Fields a salary structure carries a percentage/fixed rule for
STRUCTURE_EARNING_FIELDS: tuple[EarningField, ...] = (
    EarningField.BASIC_WAGE,
    EarningField.HOUSE_RENT_ALLOWANCE,
    EarningField.TRANSPORT_ALLOWANCE,
    EarningField.MEDICAL_ALLOWANCE,
    EarningField.SPECIAL_ALLOWANCE,
    EarningField.PF_EMPLOYER,
    EarningField.ESI_EMPLOYER,
)
STRUCTURE_DEDUCTION_FIELDS: tuple[DeductionField, ...] = (
    DeductionField.PF_EMPLOYEE,
    DeductionField.ESI_EMPLOYEE,
    DeductionField.PROFESSIONAL_TAX,
    DeductionField.INCOME_TAX,
)
BONUS_FIELDS: tuple[EarningField, ...] = (
    EarningField.PERFORMANCE_BONUS,
    EarningField.PROJECT_BONUS,
    EarningField.ATTENDANCE_BONUS,
)


class PayrollStatus(str, Enum):
    """Payroll status tag. Any value may be set at any time."""

    PENDING = "Pending"
    PROCESSED = "Processed"
    PAID = "Paid"


class PaymentStatus(str, Enum):
    """Outcome of a single payout."""

    SUCCESS = "Success"
    FAILED = "Failed"
    PENDING = "Pending"


class Applicability(str, Enum):
    """Which employees a salary structure applies to."""

    ALL = "all"
    DEPARTMENT = "department"
    POSITION = "position"
    LEVEL = "level"


MONTH_NAMES: tuple[str, ...] = tuple(calendar.month_name)[1:]


def normalize_month(month: str) -> str:
    """Return the canonical English month name ("march" -> "March").

    Raises:
        ValueError: If the value is not a month name.
    """
    candidate = month.strip().lower()
    for name in MONTH_NAMES:
        if name.lower() == candidate:
            return name
    raise ValueError(f"Unknown month name: {month!r}")


def as_decimal(value: Amount) -> Decimal:
    """Convert an input amount to Decimal. ``None`` becomes zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


@dataclass(frozen=True)
class PayrollTotals:
    """Derived totals of a payroll record."""

    earnings_total: Decimal
    deductions_total: Decimal
    net_pay: Decimal

    @property
    def ctc(self) -> Decimal:
        """Cost to company, synonymous with total earnings."""
        return self.earnings_total

    @property
    def in_hand_salary(self) -> Decimal:
        """Net pay after deductions."""
        return self.net_pay


@dataclass
class FieldRule:
    """Percentage-of-base or fixed-amount rule for one payroll field."""

    is_percentage: bool = True
    percentage: Decimal = ZERO
    fixed_amount: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> FieldRule:
        data = data or {}
        return cls(
            is_percentage=bool(data.get("is_percentage", True)),
            percentage=as_decimal(data.get("percentage")),
            fixed_amount=as_decimal(data.get("fixed_amount")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_percentage": self.is_percentage,
            "percentage": str(self.percentage),
            "fixed_amount": str(self.fixed_amount),
        }


@dataclass
class BonusRule:
    """Bonus rule: percentage of base, optionally capped at max_amount."""

    enabled: bool = False
    percentage: Decimal = ZERO
    max_amount: Decimal = ZERO

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> BonusRule:
        data = data or {}
        return cls(
            enabled=bool(data.get("enabled", False)),
            percentage=as_decimal(data.get("percentage")),
            max_amount=as_decimal(data.get("max_amount")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "percentage": str(self.percentage),
            "max_amount": str(self.max_amount),
        }


@dataclass
class OvertimeRule:
    """Overtime policy of a salary structure."""

    enabled: bool = True
    rate: Decimal = Decimal("1.5")  # multiplier on the hourly rate
    max_hours_per_day: Decimal = Decimal("4")
    max_hours_per_month: Decimal = Decimal("50")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> OvertimeRule:
        data = data or {}
        default = cls()
        return cls(
            enabled=bool(data.get("enabled", default.enabled)),
            rate=as_decimal(data.get("rate", default.rate)),
            max_hours_per_day=as_decimal(
                data.get("max_hours_per_day", default.max_hours_per_day)
            ),
            max_hours_per_month=as_decimal(
                data.get("max_hours_per_month", default.max_hours_per_month)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "rate": str(self.rate),
            "max_hours_per_day": str(self.max_hours_per_day),
            "max_hours_per_month": str(self.max_hours_per_month),
        }


def _member(value, allowed: tuple) -> Any:
    if value not in allowed:
        raise ValueError(f"{value.value} cannot be set by a salary structure")
    return value


def _default_earning_rules() -> dict[EarningField, FieldRule]:
    rules = {f: FieldRule() for f in STRUCTURE_EARNING_FIELDS}
    rules[EarningField.PF_EMPLOYER] = FieldRule(percentage=Decimal("12"))
    rules[EarningField.ESI_EMPLOYER] = FieldRule(percentage=Decimal("3.25"))
    return rules


def _default_deduction_rules() -> dict[DeductionField, FieldRule]:
    rules = {f: FieldRule() for f in STRUCTURE_DEDUCTION_FIELDS}
    rules[DeductionField.PF_EMPLOYEE] = FieldRule(percentage=Decimal("12"))
    rules[DeductionField.ESI_EMPLOYEE] = FieldRule(percentage=Decimal("0.75"))
    rules[DeductionField.PROFESSIONAL_TAX] = FieldRule(is_percentage=False)
    return rules


@dataclass
class StructureRules:
    """The calculation-relevant part of a salary structure."""

    earnings: dict[EarningField, FieldRule] = field(default_factory=_default_earning_rules)
    deductions: dict[DeductionField, FieldRule] = field(
        default_factory=_default_deduction_rules
    )
    bonuses: dict[EarningField, BonusRule] = field(
        default_factory=lambda: {f: BonusRule() for f in BONUS_FIELDS}
    )
    overtime: OvertimeRule = field(default_factory=OvertimeRule)

    @classmethod
    def from_dicts(
        cls,
        earnings: Mapping[str, Any] | None = None,
        deductions: Mapping[str, Any] | None = None,
        bonuses: Mapping[str, Any] | None = None,
        overtime: Mapping[str, Any] | None = None,
    ) -> StructureRules:
        """Build rules from stored JSON, keeping defaults for missing fields."""
        rules = cls()
        for key, value in (earnings or {}).items():
            rules.earnings[_member(EarningField(key), STRUCTURE_EARNING_FIELDS)] = (
                FieldRule.from_dict(value)
            )
        for key, value in (deductions or {}).items():
            rules.deductions[_member(DeductionField(key), STRUCTURE_DEDUCTION_FIELDS)] = (
                FieldRule.from_dict(value)
            )
        for key, value in (bonuses or {}).items():
            rules.bonuses[_member(EarningField(key), BONUS_FIELDS)] = BonusRule.from_dict(value)
        if overtime is not None:
            rules.overtime = OvertimeRule.from_dict(overtime)
        return rules


@dataclass
class SalaryBreakdown:
    """Concrete earnings/deductions resolved for one employee."""

    earnings: dict[str, Decimal]
    deductions: dict[str, Decimal]
    totals: PayrollTotals

    def to_dict(self) -> dict[str, Any]:
        return {
            "earnings": dict(self.earnings),
            "deductions": dict(self.deductions),
            "total_earnings": self.totals.earnings_total,
            "total_deductions": self.totals.deductions_total,
            "net_salary": self.totals.net_pay,
        }
