"""Payroll record service."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.calculators.structure import SalaryStructureApplier, default_breakdown
from hr_payroll.calculators.totals import TotalsCalculator
from hr_payroll.calculators.types import (
    MONTH_NAMES,
    Amount,
    PayrollStatus,
    SalaryBreakdown,
    as_decimal,
    normalize_month,
)
from hr_payroll.errors import DuplicateError, InvalidInputError, NotFoundError
from hr_payroll.models import (
    DEDUCTION_FIELDS,
    EARNING_FIELDS,
    Employee,
    PayrollRecord,
    SalaryStructure,
)

logger = logging.getLogger(__name__)

NOT_GENERATED = "Not Generated"

_month_order = case(
    {name: index for index, name in enumerate(MONTH_NAMES, start=1)},
    value=PayrollRecord.month,
    else_=0,
)


@dataclass(frozen=True)
class PayrollSummary:
    """One row of the admin month overview."""

    employee_id: UUID
    employee_code: str
    name: str
    department: str | None
    position: str | None
    basic_salary: Decimal
    ctc: Decimal
    in_hand_salary: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    status: str
    is_visible: bool
    payroll_id: UUID | None = None


@dataclass(frozen=True)
class PayrollPage:
    """A page of an employee's payroll history."""

    payrolls: list[PayrollRecord]
    total: int
    total_pages: int
    current_page: int


@dataclass(frozen=True)
class BulkGenerationResult:
    """Outcome of generating payrolls for every eligible employee."""

    month: str
    year: int
    created: int
    skipped: int
    payroll_ids: list[UUID]


def check_month(month: str) -> str:
    """Canonical month name, or InvalidInputError."""
    try:
        return normalize_month(month)
    except ValueError as e:
        raise InvalidInputError(str(e)) from e


def check_status(status: str) -> str:
    """Validated payroll status value, or InvalidInputError."""
    try:
        return PayrollStatus(status).value
    except ValueError as e:
        raise InvalidInputError(f"Unknown payroll status: {status}") from e


def _set_amounts(
    record: PayrollRecord,
    amounts: Mapping[str, Amount] | None,
    allowed: tuple[str, ...],
    kind: str,
) -> None:
    for name, value in (amounts or {}).items():
        if name not in allowed:
            raise InvalidInputError(f"Unknown {kind} field: {name}")
        setattr(record, name, as_decimal(value))


class PayrollService:
    """Creates, edits and queries payroll records.

    Derived totals are recomputed through TotalsCalculator on every create
    and every update.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_employee(self, employee_id: UUID) -> Employee:
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def get_payroll(self, payroll_id: UUID) -> PayrollRecord:
        payroll = await self.session.get(PayrollRecord, payroll_id)
        if payroll is None:
            raise NotFoundError("Payroll", payroll_id)
        return payroll

    async def find_payroll(
        self, employee_id: UUID, month: str, year: int
    ) -> PayrollRecord | None:
        """Payroll for an employee and period, if one exists."""
        result = await self.session.execute(
            select(PayrollRecord).where(
                PayrollRecord.employee_id == employee_id,
                PayrollRecord.month == check_month(month),
                PayrollRecord.year == year,
            )
        )
        return result.scalar_one_or_none()

    async def get_period_payroll(
        self, employee_id: UUID, month: str, year: int
    ) -> PayrollRecord:
        payroll = await self.find_payroll(employee_id, month, year)
        if payroll is None:
            raise NotFoundError("Payroll", f"{employee_id}/{month}/{year}")
        return payroll

    async def list_month_summaries(self, month: str, year: int) -> list[PayrollSummary]:
        """Overview of every employee with a salary for one month.

        Employees without a payroll report status "Not Generated" and fall
        back to their basic salary for ctc and in-hand salary.
        """
        month = check_month(month)
        employees = (
            await self.session.execute(
                select(Employee)
                .where(Employee.salary.is_not(None))
                .order_by(Employee.employee_code)
            )
        ).scalars().all()
        payrolls = (
            await self.session.execute(
                select(PayrollRecord).where(
                    PayrollRecord.month == month, PayrollRecord.year == year
                )
            )
        ).scalars().all()
        by_employee = {p.employee_id: p for p in payrolls}

        summaries = []
        for employee in employees:
            payroll = by_employee.get(employee.employee_id)
            basic = employee.salary or Decimal("0")
            summaries.append(
                PayrollSummary(
                    employee_id=employee.employee_id,
                    employee_code=employee.employee_code,
                    name=employee.full_name,
                    department=employee.department,
                    position=employee.position,
                    basic_salary=basic,
                    ctc=payroll.ctc if payroll else basic,
                    in_hand_salary=payroll.in_hand_salary if payroll else basic,
                    total_earnings=payroll.total_earnings if payroll else Decimal("0"),
                    total_deductions=payroll.total_deductions if payroll else Decimal("0"),
                    status=payroll.status if payroll else NOT_GENERATED,
                    is_visible=payroll.is_visible if payroll else True,
                    payroll_id=payroll.payroll_id if payroll else None,
                )
            )
        return summaries

    async def create_payroll(
        self,
        employee_id: UUID,
        month: str,
        year: int,
        earnings: Mapping[str, Amount] | None = None,
        deductions: Mapping[str, Amount] | None = None,
        basic_salary: Amount = None,
        status: str = PayrollStatus.PENDING.value,
        notes: str | None = None,
        is_visible: bool = True,
    ) -> PayrollRecord:
        """Create a payroll from explicit field values.

        Raises:
            NotFoundError: If the employee does not exist.
            DuplicateError: If the period already has a payroll.
        """
        employee = await self.get_employee(employee_id)
        month = check_month(month)
        await self._ensure_no_payroll(employee_id, month, year)

        record = PayrollRecord(
            employee=employee,
            month=month,
            year=year,
            basic_salary=(
                as_decimal(basic_salary)
                if basic_salary is not None
                else employee.salary or Decimal("0")
            ),
            status=check_status(status),
            notes=notes,
            is_visible=is_visible,
        )
        # Unset money columns are only defaulted at flush time
        for name in EARNING_FIELDS + DEDUCTION_FIELDS:
            setattr(record, name, Decimal("0"))
        _set_amounts(record, earnings, EARNING_FIELDS, "earning")
        _set_amounts(record, deductions, DEDUCTION_FIELDS, "deduction")
        self._stamp_status_dates(record)
        TotalsCalculator.apply_to_record(record)

        self.session.add(record)
        await self.session.flush()
        logger.info(
            "Created payroll %s for employee %s (%s %s)",
            record.payroll_id, employee.employee_code, month, year,
        )
        return record

    async def create_from_breakdown(
        self,
        employee: Employee,
        month: str,
        year: int,
        breakdown: SalaryBreakdown,
    ) -> PayrollRecord:
        """Create a payroll from a resolved salary breakdown."""
        return await self.create_payroll(
            employee.employee_id,
            month,
            year,
            earnings=breakdown.earnings,
            deductions=breakdown.deductions,
            basic_salary=employee.salary or Decimal("0"),
        )

    async def update_payroll(
        self,
        payroll_id: UUID,
        earnings: Mapping[str, Amount] | None = None,
        deductions: Mapping[str, Amount] | None = None,
        status: str | None = None,
        notes: str | None = None,
        is_visible: bool | None = None,
        basic_salary: Amount = None,
    ) -> PayrollRecord:
        """Apply edited values to a payroll.

        Only the fields present in earnings/deductions are changed. Totals
        are recomputed afterwards. Status is a plain tag and may be set to
        any value at any time.
        """
        record = await self.get_payroll(payroll_id)
        _set_amounts(record, earnings, EARNING_FIELDS, "earning")
        _set_amounts(record, deductions, DEDUCTION_FIELDS, "deduction")
        if basic_salary is not None:
            record.basic_salary = as_decimal(basic_salary)
        if status is not None:
            record.status = check_status(status)
            self._stamp_status_dates(record)
        if notes is not None:
            record.notes = notes
        if is_visible is not None:
            record.is_visible = is_visible
        TotalsCalculator.apply_to_record(record)
        await self.session.flush()
        return record

    async def set_visibility(self, payroll_id: UUID, is_visible: bool) -> PayrollRecord:
        """Show or hide a payroll from the employee."""
        record = await self.get_payroll(payroll_id)
        record.is_visible = is_visible
        await self.session.flush()
        return record

    async def get_employee_history(
        self,
        employee_id: UUID,
        page: int = 1,
        limit: int = 12,
        visible_only: bool = False,
    ) -> PayrollPage:
        """Page through an employee's payrolls, newest period first."""
        await self.get_employee(employee_id)
        page = max(page, 1)
        limit = max(limit, 1)

        conditions = [PayrollRecord.employee_id == employee_id]
        if visible_only:
            conditions.append(PayrollRecord.is_visible.is_(True))

        total = (
            await self.session.execute(
                select(func.count()).select_from(PayrollRecord).where(*conditions)
            )
        ).scalar_one()
        payrolls = (
            await self.session.execute(
                select(PayrollRecord)
                .where(*conditions)
                .order_by(PayrollRecord.year.desc(), _month_order.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
        ).scalars().all()

        return PayrollPage(
            payrolls=list(payrolls),
            total=total,
            total_pages=math.ceil(total / limit),
            current_page=page,
        )

    async def get_current_payroll(
        self,
        employee_id: UUID,
        today: date | None = None,
    ) -> PayrollRecord:
        """Payroll for the current month, created from the default template if missing."""
        today = today or date.today()
        month = MONTH_NAMES[today.month - 1]
        payroll = await self.find_payroll(employee_id, month, today.year)
        if payroll is not None:
            return payroll

        employee = await self.get_employee(employee_id)
        return await self.create_from_breakdown(
            employee, month, today.year, default_breakdown(employee.salary)
        )

    async def generate_bulk(
        self,
        month: str,
        year: int,
        structure_id: UUID | None = None,
    ) -> BulkGenerationResult:
        """Create payrolls for every active employee with a salary.

        Employees that already have a payroll for the period are skipped, as
        are employees the given structure does not apply to.
        """
        month = check_month(month)
        structure = None
        if structure_id is not None:
            structure = await self.session.get(SalaryStructure, structure_id)
            if structure is None:
                raise NotFoundError("Salary structure", structure_id)

        employees = (
            await self.session.execute(
                select(Employee)
                .where(Employee.is_active.is_(True), Employee.salary.is_not(None))
                .order_by(Employee.employee_code)
            )
        ).scalars().all()
        existing = set(
            (
                await self.session.execute(
                    select(PayrollRecord.employee_id).where(
                        PayrollRecord.month == month, PayrollRecord.year == year
                    )
                )
            ).scalars().all()
        )

        created: list[UUID] = []
        skipped = 0
        for employee in employees:
            if employee.employee_id in existing:
                skipped += 1
                continue
            if structure is None:
                breakdown = default_breakdown(employee.salary)
            elif SalaryStructureApplier.is_applicable(
                structure.applicable_to, structure.applicable_values, employee
            ):
                breakdown = SalaryStructureApplier.apply(structure.rules, employee.salary)
            else:
                skipped += 1
                continue
            record = await self.create_from_breakdown(employee, month, year, breakdown)
            created.append(record.payroll_id)

        logger.info(
            "Bulk payroll for %s %s: %d created, %d skipped",
            month, year, len(created), skipped,
        )
        return BulkGenerationResult(
            month=month,
            year=year,
            created=len(created),
            skipped=skipped,
            payroll_ids=created,
        )

    async def _ensure_no_payroll(self, employee_id: UUID, month: str, year: int) -> None:
        existing = await self.find_payroll(employee_id, month, year)
        if existing is not None:
            raise DuplicateError(
                f"Payroll already exists for this employee and period ({month} {year})"
            )

    @staticmethod
    def _stamp_status_dates(record: PayrollRecord) -> None:
        today = date.today()
        if record.status == PayrollStatus.PROCESSED.value and record.processed_date is None:
            record.processed_date = today
        if record.status == PayrollStatus.PAID.value and record.paid_date is None:
            record.paid_date = today

    @staticmethod
    def payslip(record: PayrollRecord) -> dict[str, Any]:
        """Payslip view of a payroll record."""
        employee = record.employee
        return {
            "payroll_id": record.payroll_id,
            "employee": {
                "employee_id": employee.employee_id,
                "employee_code": employee.employee_code,
                "name": employee.full_name,
                "email": employee.email,
                "department": employee.department,
                "position": employee.position,
            },
            "period": {"month": record.month, "year": record.year},
            "basic_salary": record.basic_salary,
            "earnings": record.earnings_map(),
            "deductions": record.deductions_map(),
            "total_earnings": record.total_earnings,
            "total_deductions": record.total_deductions,
            "ctc": record.ctc,
            "in_hand_salary": record.in_hand_salary,
            "status": record.status,
            "processed_date": record.processed_date,
            "paid_date": record.paid_date,
        }
