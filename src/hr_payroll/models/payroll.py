"""Payroll record model."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.calculators.types import DeductionField, EarningField
from hr_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee

EARNING_FIELDS: tuple[str, ...] = tuple(f.value for f in EarningField)
DEDUCTION_FIELDS: tuple[str, ...] = tuple(f.value for f in DeductionField)


def _money() -> Mapped[Decimal]:
    return mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))


class PayrollRecord(Base, TimestampMixin):
    """One employee's payroll for one month.

    total_earnings, total_deductions, ctc and in_hand_salary are derived
    columns. They are written only by TotalsCalculator.apply_to_record.
    """

    __tablename__ = "payroll_record"

    payroll_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    month: Mapped[str] = mapped_column(String(9), nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    basic_salary: Mapped[Decimal] = _money()

    # Earnings
    basic_wage: Mapped[Decimal] = _money()
    house_rent_allowance: Mapped[Decimal] = _money()
    transport_allowance: Mapped[Decimal] = _money()
    medical_allowance: Mapped[Decimal] = _money()
    overtime: Mapped[Decimal] = _money()
    gratuity: Mapped[Decimal] = _money()
    special_allowance: Mapped[Decimal] = _money()
    performance_bonus: Mapped[Decimal] = _money()
    project_bonus: Mapped[Decimal] = _money()
    attendance_bonus: Mapped[Decimal] = _money()
    pf_employer: Mapped[Decimal] = _money()
    esi_employer: Mapped[Decimal] = _money()

    # Deductions
    pf_employee: Mapped[Decimal] = _money()
    esi_employee: Mapped[Decimal] = _money()
    professional_tax: Mapped[Decimal] = _money()
    income_tax: Mapped[Decimal] = _money()
    advance_salary: Mapped[Decimal] = _money()
    loan_deduction: Mapped[Decimal] = _money()
    other_deductions: Mapped[Decimal] = _money()

    # Derived
    total_earnings: Mapped[Decimal] = _money()
    total_deductions: Mapped[Decimal] = _money()
    ctc: Mapped[Decimal] = _money()
    in_hand_salary: Mapped[Decimal] = _money()

    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Pending")
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    processed_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Payment outcome
    payment_provider: Mapped[str | None] = mapped_column(String(50), nullable=True)
    payment_reference: Mapped[str | None] = mapped_column(String(100), nullable=True)
    payment_status: Mapped[str | None] = mapped_column(String(20), nullable=True)
    payment_processed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    payment_error: Mapped[str | None] = mapped_column(String(500), nullable=True)

    employee: Mapped[Employee] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("employee_id", "month", "year", name="payroll_record_period_unique"),
        CheckConstraint(
            "status IN ('Pending', 'Processed', 'Paid')",
            name="payroll_record_status_check",
        ),
    )

    def earnings_map(self) -> dict[str, Decimal]:
        """Earning field values keyed by field name."""
        return {name: getattr(self, name) or Decimal("0") for name in EARNING_FIELDS}

    def deductions_map(self) -> dict[str, Decimal]:
        """Deduction field values keyed by field name."""
        return {name: getattr(self, name) or Decimal("0") for name in DEDUCTION_FIELDS}
