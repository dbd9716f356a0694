"""Tests for the disbursement service."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.payments import MockBankProvider
from hr_payroll.payments.mock_bank import INVALID_AMOUNT, MISSING_BANK_DETAILS
from hr_payroll.services import DisbursementService, PayrollService


@pytest.fixture
async def march_payrolls(session: AsyncSession, employees):
    """March 2024 payrolls for alice, bob and carol."""
    service = PayrollService(session)
    records = {}
    for key in ("alice", "bob"):
        records[key] = await service.create_payroll(
            employees[key].employee_id,
            "March",
            2024,
            earnings={"basic_wage": 10000},
            deductions={"income_tax": 1000},
        )
    # nothing to pay out
    records["carol"] = await service.create_payroll(
        employees["carol"].employee_id, "March", 2024
    )
    return records


class TestDisburse:
    """Test paying out a month."""

    async def test_pays_and_records_outcomes(self, session: AsyncSession, march_payrolls):
        provider = MockBankProvider()
        service = DisbursementService(session, provider)

        summary = await service.disburse("March", 2024)

        assert (summary.total, summary.paid, summary.failed) == (3, 1, 2)
        results = {r.employee_name: r for r in summary.results}

        alice = results["Alice Tester"]
        assert alice.status == "Success"
        assert alice.amount == Decimal("9000")
        assert alice.reference in provider.transfers
        assert alice.error is None

        assert results["Bob Tester"].status == "Failed"
        assert results["Bob Tester"].error == MISSING_BANK_DETAILS
        assert results["Carol Tester"].error == INVALID_AMOUNT

    async def test_updates_payroll_records(self, session: AsyncSession, march_payrolls):
        await DisbursementService(session, MockBankProvider()).disburse("March", 2024)

        alice = march_payrolls["alice"]
        assert alice.status == "Paid"
        assert alice.paid_date is not None
        assert alice.payment_status == "Success"
        assert alice.payment_reference.startswith("MOCK-")
        assert alice.payment_provider == "mock-bank"

        bob = march_payrolls["bob"]
        assert bob.status == "Pending"
        assert bob.payment_status == "Failed"
        assert bob.payment_error == MISSING_BANK_DETAILS

    async def test_paid_payrolls_are_not_paid_twice(
        self, session: AsyncSession, march_payrolls
    ):
        provider = MockBankProvider()
        service = DisbursementService(session, provider)
        await service.disburse("March", 2024)

        summary = await service.disburse("March", 2024)

        assert summary.total == 2
        assert summary.paid == 0
        assert len(provider.transfers) == 1

    async def test_empty_month(self, session: AsyncSession, employees):
        summary = await DisbursementService(session, MockBankProvider()).disburse("April", 2024)

        assert summary.to_dict() == {
            "success": True,
            "month": "April",
            "year": 2024,
            "total": 0,
            "paid": 0,
            "failed": 0,
            "results": [],
        }

    async def test_results_ordered_by_employee_code(
        self, session: AsyncSession, march_payrolls
    ):
        summary = await DisbursementService(session, MockBankProvider()).disburse("March", 2024)

        assert [r.employee_email for r in summary.results] == [
            "alice@example.com",
            "bob@example.com",
            "carol@example.com",
        ]


class TestRecordedResults:
    """Test rebuilding results from stored payment fields."""

    async def test_matches_last_run(self, session: AsyncSession, march_payrolls):
        service = DisbursementService(session, MockBankProvider())
        summary = await service.disburse("March", 2024)

        recorded = await service.recorded_results("March", 2024)

        assert [r.to_dict() for r in recorded.results] == [r.to_dict() for r in summary.results]

    async def test_excludes_never_disbursed(self, session: AsyncSession, march_payrolls):
        recorded = await DisbursementService(session, MockBankProvider()).recorded_results(
            "March", 2024
        )

        assert recorded.total == 0


class TestRepeatedDisbursement:
    """Test disbursing a period again after failures or a status reset."""

    async def test_failed_payout_succeeds_once_details_fixed(
        self, session: AsyncSession, employees, march_payrolls
    ):
        service = DisbursementService(session, MockBankProvider())
        await service.disburse("March", 2024)

        bob = employees["bob"]
        bob.bank_name = "State Bank"
        bob.ifsc = "SBIN0005678"
        bob.account_no = "000987654321"
        bob.account_name = "Bob Tester"
        summary = await service.disburse("March", 2024)

        results = {r.employee_name: r for r in summary.results}
        assert results["Bob Tester"].status == "Success"
        record = march_payrolls["bob"]
        assert record.status == "Paid"
        assert record.payment_error is None
        assert record.payment_reference.startswith("MOCK-")

    async def test_failure_after_reset_clears_old_reference(
        self, session: AsyncSession, employees, march_payrolls
    ):
        service = DisbursementService(session, MockBankProvider())
        first = await service.disburse("March", 2024)
        old_reference = next(
            r.reference for r in first.results if r.employee_name == "Alice Tester"
        )

        await PayrollService(session).update_payroll(
            march_payrolls["alice"].payroll_id, status="Pending"
        )
        employees["alice"].bank_name = None
        await service.disburse("March", 2024)

        alice = march_payrolls["alice"]
        assert alice.payment_status == "Failed"
        assert alice.payment_reference is None
        assert alice.payment_error == MISSING_BANK_DETAILS

        recorded = {
            r.employee_name: r for r in (await service.recorded_results("March", 2024)).results
        }
        assert recorded["Alice Tester"].status == "Failed"
        assert recorded["Alice Tester"].reference is None
        assert recorded["Alice Tester"].reference != old_reference
        assert recorded["Alice Tester"].error == MISSING_BANK_DETAILS
