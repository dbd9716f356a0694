"""Disbursement service - pays out a month's payrolls."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.calculators.types import PaymentStatus, PayrollStatus
from hr_payroll.models import Employee, PayrollRecord
from hr_payroll.models.base import utcnow
from hr_payroll.payments.base import BankTransferProvider, Beneficiary
from hr_payroll.services.payroll_service import check_month

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DisbursementResult:
    """Outcome of paying one employee."""

    payroll_id: str
    employee_name: str
    employee_email: str
    amount: Decimal
    status: str
    reference: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class DisbursementSummary:
    """Outcome of a whole disbursement run."""

    month: str
    year: int
    results: list[DisbursementResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def paid(self) -> int:
        return sum(1 for r in self.results if r.status == PaymentStatus.SUCCESS.value)

    @property
    def failed(self) -> int:
        return self.total - self.paid

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": True,
            "month": self.month,
            "year": self.year,
            "total": self.total,
            "paid": self.paid,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
        }


def _beneficiary(employee: Employee) -> Beneficiary:
    return Beneficiary(
        account_name=employee.account_name,
        account_no=employee.account_no,
        ifsc=employee.ifsc,
        bank_name=employee.bank_name,
    )


class DisbursementService:
    """Transfers each unpaid payroll's in-hand salary once.

    A successful transfer marks the payroll Paid. A failed transfer records
    the error and leaves the status alone. There are no retries.
    """

    def __init__(
        self,
        session: AsyncSession,
        provider: BankTransferProvider,
        currency: str = "INR",
    ):
        self.session = session
        self.provider = provider
        self.currency = currency

    async def disburse(self, month: str, year: int) -> DisbursementSummary:
        """Pay every payroll of the period that is not already Paid."""
        month = check_month(month)
        payrolls = (
            await self.session.execute(
                select(PayrollRecord)
                .join(PayrollRecord.employee)
                .where(
                    PayrollRecord.month == month,
                    PayrollRecord.year == year,
                    PayrollRecord.status != PayrollStatus.PAID.value,
                )
                .order_by(Employee.employee_code)
            )
        ).scalars().all()

        summary = DisbursementSummary(month=month, year=year)
        for payroll in payrolls:
            summary.results.append(self._pay(payroll))

        await self.session.flush()
        logger.info(
            "Disbursement %s %s: %d total, %d paid, %d failed",
            month, year, summary.total, summary.paid, summary.failed,
        )
        return summary

    def _pay(self, payroll: PayrollRecord) -> DisbursementResult:
        employee = payroll.employee
        amount = payroll.in_hand_salary
        outcome = self.provider.transfer(amount, _beneficiary(employee), self.currency)

        payroll.payment_provider = outcome.provider
        payroll.payment_processed_at = utcnow()
        if outcome.success:
            payroll.status = PayrollStatus.PAID.value
            payroll.paid_date = date.today()
            payroll.payment_status = PaymentStatus.SUCCESS.value
            payroll.payment_reference = outcome.reference
            payroll.payment_error = None
        else:
            payroll.payment_status = PaymentStatus.FAILED.value
            payroll.payment_reference = None
            payroll.payment_error = outcome.error
            logger.warning(
                "Payout failed for %s (payroll %s): %s",
                employee.employee_code, payroll.payroll_id, outcome.error,
            )

        return DisbursementResult(
            payroll_id=str(payroll.payroll_id),
            employee_name=employee.full_name,
            employee_email=employee.email,
            amount=amount,
            status=payroll.payment_status,
            reference=outcome.reference if outcome.success else None,
            error=None if outcome.success else outcome.error,
        )

    async def recorded_results(self, month: str, year: int) -> DisbursementSummary:
        """Rebuild the results of past disbursements from stored payment fields."""
        month = check_month(month)
        payrolls = (
            await self.session.execute(
                select(PayrollRecord)
                .join(PayrollRecord.employee)
                .where(
                    PayrollRecord.month == month,
                    PayrollRecord.year == year,
                    PayrollRecord.payment_status.is_not(None),
                )
                .order_by(Employee.employee_code)
            )
        ).scalars().all()

        summary = DisbursementSummary(month=month, year=year)
        for payroll in payrolls:
            summary.results.append(
                DisbursementResult(
                    payroll_id=str(payroll.payroll_id),
                    employee_name=payroll.employee.full_name,
                    employee_email=payroll.employee.email,
                    amount=payroll.in_hand_salary,
                    status=payroll.payment_status,
                    reference=payroll.payment_reference,
                    error=payroll.payment_error,
                )
            )
        return summary
