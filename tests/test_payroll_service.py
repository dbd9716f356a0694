"""Tests for the payroll service."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.errors import DuplicateError, InvalidInputError, NotFoundError
from hr_payroll.models import Employee, SalaryStructure
from hr_payroll.services.payroll_service import NOT_GENERATED, PayrollService


class TestCreateAndUpdate:
    """Test manual payroll creation and editing."""

    async def test_create_computes_totals(self, session: AsyncSession, employees):
        service = PayrollService(session)

        record = await service.create_payroll(
            employees["alice"].employee_id,
            "March",
            2024,
            earnings={"basic_wage": 30000, "house_rent_allowance": 12000},
            deductions={"pf_employee": 3600, "professional_tax": 200},
        )

        assert record.total_earnings == Decimal("42000")
        assert record.total_deductions == Decimal("3800")
        assert record.ctc == Decimal("42000")
        assert record.in_hand_salary == Decimal("38200")
        assert record.status == "Pending"
        assert record.basic_salary == Decimal("50000")
        assert record.gratuity == 0

    async def test_month_name_is_normalized(self, session: AsyncSession, employees):
        record = await PayrollService(session).create_payroll(
            employees["alice"].employee_id, "march", 2024
        )

        assert record.month == "March"

    async def test_unknown_month_rejected(self, session: AsyncSession, employees):
        with pytest.raises(InvalidInputError):
            await PayrollService(session).create_payroll(
                employees["alice"].employee_id, "Smarch", 2024
            )

    async def test_unknown_field_rejected(self, session: AsyncSession, employees):
        with pytest.raises(InvalidInputError):
            await PayrollService(session).create_payroll(
                employees["alice"].employee_id, "March", 2024, earnings={"tips": 10}
            )

    async def test_duplicate_period_rejected(self, session: AsyncSession, employees):
        service = PayrollService(session)
        await service.create_payroll(employees["alice"].employee_id, "March", 2024)

        with pytest.raises(DuplicateError):
            await service.create_payroll(employees["alice"].employee_id, "March", 2024)

    async def test_unknown_employee(self, session: AsyncSession, employees):
        with pytest.raises(NotFoundError):
            await PayrollService(session).create_payroll(uuid4(), "March", 2024)

    async def test_update_recomputes_totals(self, session: AsyncSession, employees):
        service = PayrollService(session)
        record = await service.create_payroll(
            employees["alice"].employee_id,
            "March",
            2024,
            earnings={"basic_wage": 30000},
            deductions={"income_tax": 3000},
        )

        updated = await service.update_payroll(
            record.payroll_id,
            earnings={"performance_bonus": 5000},
            deductions={"loan_deduction": 1000},
        )

        assert updated.basic_wage == Decimal("30000")
        assert updated.total_earnings == Decimal("35000")
        assert updated.total_deductions == Decimal("4000")
        assert updated.in_hand_salary == Decimal("31000")

    async def test_negative_amounts_accepted(self, session: AsyncSession, employees):
        record = await PayrollService(session).create_payroll(
            employees["alice"].employee_id,
            "March",
            2024,
            earnings={"basic_wage": 1000},
            deductions={"other_deductions": -500},
        )

        assert record.in_hand_salary == Decimal("1500")

    async def test_status_is_a_free_tag(self, session: AsyncSession, employees):
        service = PayrollService(session)
        record = await service.create_payroll(
            employees["alice"].employee_id, "March", 2024, status="Paid"
        )
        assert record.paid_date == date.today()

        record = await service.update_payroll(record.payroll_id, status="Pending")
        assert record.status == "Pending"

        record = await service.update_payroll(record.payroll_id, status="Processed")
        assert record.processed_date == date.today()

    async def test_invalid_status(self, session: AsyncSession, employees):
        service = PayrollService(session)
        record = await service.create_payroll(employees["alice"].employee_id, "March", 2024)

        with pytest.raises(InvalidInputError):
            await service.update_payroll(record.payroll_id, status="Done")

    async def test_set_visibility(self, session: AsyncSession, employees):
        service = PayrollService(session)
        record = await service.create_payroll(employees["alice"].employee_id, "March", 2024)

        record = await service.set_visibility(record.payroll_id, False)

        assert record.is_visible is False


class TestQueries:
    """Test summaries, history and the current-month default."""

    async def test_month_summaries(self, session: AsyncSession, employees):
        service = PayrollService(session)
        await service.create_payroll(
            employees["alice"].employee_id,
            "March",
            2024,
            earnings={"basic_wage": 50000},
            deductions={"income_tax": 5000},
        )

        summaries = {s.employee_code: s for s in await service.list_month_summaries("March", 2024)}

        # carol has no salary
        assert set(summaries) == {"EMP001", "EMP002", "EMP004"}
        alice = summaries["EMP001"]
        assert alice.status == "Pending"
        assert alice.in_hand_salary == Decimal("45000")
        assert alice.total_deductions == Decimal("5000")

        bob = summaries["EMP002"]
        assert bob.status == NOT_GENERATED
        assert bob.ctc == Decimal("30000")
        assert bob.in_hand_salary == Decimal("30000")
        assert bob.total_earnings == 0
        assert bob.payroll_id is None

    async def test_history_newest_first_and_paginated(self, session: AsyncSession, employees):
        service = PayrollService(session)
        alice = employees["alice"].employee_id
        for month, year in [("January", 2024), ("December", 2023), ("March", 2024), ("February", 2024)]:
            await service.create_payroll(alice, month, year)

        first = await service.get_employee_history(alice, page=1, limit=3)
        second = await service.get_employee_history(alice, page=2, limit=3)

        assert [(p.month, p.year) for p in first.payrolls] == [
            ("March", 2024),
            ("February", 2024),
            ("January", 2024),
        ]
        assert [(p.month, p.year) for p in second.payrolls] == [("December", 2023)]
        assert first.total == 4
        assert first.total_pages == 2
        assert second.current_page == 2

    async def test_history_visible_only(self, session: AsyncSession, employees):
        service = PayrollService(session)
        alice = employees["alice"].employee_id
        hidden = await service.create_payroll(alice, "January", 2024, is_visible=False)
        await service.create_payroll(alice, "February", 2024)

        page = await service.get_employee_history(alice, visible_only=True)

        assert page.total == 1
        assert hidden.payroll_id not in {p.payroll_id for p in page.payrolls}

    async def test_current_payroll_created_from_default(self, session: AsyncSession, employees):
        service = PayrollService(session)
        today = date(2024, 3, 15)

        record = await service.get_current_payroll(employees["alice"].employee_id, today=today)

        assert (record.month, record.year) == ("March", 2024)
        assert record.house_rent_allowance == Decimal("20000")
        assert record.in_hand_salary == Decimal("69550")

        again = await service.get_current_payroll(employees["alice"].employee_id, today=today)
        assert again.payroll_id == record.payroll_id

    async def test_period_payroll_not_found(self, session: AsyncSession, employees):
        with pytest.raises(NotFoundError):
            await PayrollService(session).get_period_payroll(
                employees["alice"].employee_id, "March", 2024
            )

    async def test_payslip(self, session: AsyncSession, employees):
        service = PayrollService(session)
        record = await service.create_payroll(
            employees["alice"].employee_id, "March", 2024, earnings={"basic_wage": 100}
        )

        slip = PayrollService.payslip(record)

        assert slip["employee"]["name"] == "Alice Tester"
        assert slip["period"] == {"month": "March", "year": 2024}
        assert slip["earnings"]["basic_wage"] == Decimal("100")
        assert slip["in_hand_salary"] == Decimal("100")


class TestBulkGeneration:
    """Test bulk payroll generation."""

    async def test_default_template(self, session: AsyncSession, employees):
        service = PayrollService(session)
        await service.create_payroll(employees["bob"].employee_id, "March", 2024)

        result = await service.generate_bulk("March", 2024)

        # alice created, bob already has one, carol has no salary, dave inactive
        assert result.created == 1
        assert result.skipped == 1
        alice = await service.get_period_payroll(employees["alice"].employee_id, "March", 2024)
        assert alice.in_hand_salary == Decimal("69550")

    async def test_with_structure_skips_non_applicable(self, session: AsyncSession, employees):
        structure = SalaryStructure(
            name="Engineering",
            applicable_to="department",
            applicable_values=["Engineering"],
            earnings={"basic_wage": {"is_percentage": True, "percentage": "100"}},
            deductions={},
            bonuses={},
            overtime={},
        )
        session.add(structure)
        await session.flush()

        service = PayrollService(session)
        result = await service.generate_bulk("April", 2024, structure_id=structure.structure_id)

        assert result.created == 1
        assert result.skipped == 1
        alice = await service.get_period_payroll(employees["alice"].employee_id, "April", 2024)
        assert alice.basic_wage == Decimal("50000")
        assert alice.pf_employer == Decimal("6000")

    async def test_unknown_structure(self, session: AsyncSession, employees):
        with pytest.raises(NotFoundError):
            await PayrollService(session).generate_bulk("March", 2024, structure_id=uuid4())

    async def test_employee_is_loaded(self, session: AsyncSession, employees):
        result = await PayrollService(session).generate_bulk("May", 2024)
        record = await PayrollService(session).get_payroll(result.payroll_ids[0])

        assert isinstance(record.employee, Employee)
