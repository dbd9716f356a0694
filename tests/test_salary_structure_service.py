"""Tests for the salary structure service."""

from decimal import Decimal

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.errors import (
    DuplicateError,
    InUseError,
    InvalidInputError,
    NotApplicableError,
)
from hr_payroll.services import SalaryStructureService

STANDARD_EARNINGS = {
    "basic_wage": {"is_percentage": True, "percentage": 40},
    "house_rent_allowance": {"is_percentage": True, "percentage": 20},
}
STANDARD_DEDUCTIONS = {
    "professional_tax": {"is_percentage": False, "fixed_amount": 200},
}


@pytest.fixture
async def structure(session: AsyncSession, employees):
    return await SalaryStructureService(session).create_structure(
        name="Standard",
        earnings=STANDARD_EARNINGS,
        deductions=STANDARD_DEDUCTIONS,
    )


class TestStructureCrud:
    """Test creating, listing, updating and deleting structures."""

    async def test_create_keeps_defaults(self, structure):
        rules = structure.rules

        assert rules.earnings["basic_wage"].percentage == Decimal("40")
        assert rules.earnings["pf_employer"].percentage == Decimal("12")
        assert rules.deductions["esi_employee"].percentage == Decimal("0.75")
        assert rules.overtime.rate == Decimal("1.5")
        assert structure.applicable_to == "all"

    async def test_duplicate_name(self, session: AsyncSession, structure):
        with pytest.raises(DuplicateError):
            await SalaryStructureService(session).create_structure(name="Standard")

    async def test_unknown_rule_field(self, session: AsyncSession, employees):
        with pytest.raises(InvalidInputError):
            await SalaryStructureService(session).create_structure(
                name="Broken", earnings={"gratuity": {"percentage": 5}}
            )

    async def test_unknown_applicability(self, session: AsyncSession, employees):
        with pytest.raises(InvalidInputError):
            await SalaryStructureService(session).create_structure(
                name="Broken", applicable_to="team"
            )

    async def test_list_filters_active(self, session: AsyncSession, structure):
        service = SalaryStructureService(session)
        await service.create_structure(name="Legacy", is_active=False)

        assert [s.name for s in await service.list_structures()] == ["Legacy", "Standard"]
        assert [s.name for s in await service.list_structures(is_active=True)] == ["Standard"]

    async def test_update_merges_rules(self, session: AsyncSession, structure):
        service = SalaryStructureService(session)

        updated = await service.update_structure(
            structure.structure_id,
            {
                "description": "Revised",
                "earnings": {"special_allowance": {"is_percentage": False, "fixed_amount": 500}},
            },
        )

        rules = updated.rules
        assert updated.description == "Revised"
        assert rules.earnings["basic_wage"].percentage == Decimal("40")
        assert rules.earnings["special_allowance"].fixed_amount == Decimal("500")
        assert rules.deductions["professional_tax"].fixed_amount == Decimal("200")

    async def test_update_rename_to_taken_name(self, session: AsyncSession, structure):
        service = SalaryStructureService(session)
        other = await service.create_structure(name="Other")

        with pytest.raises(DuplicateError):
            await service.update_structure(other.structure_id, {"name": "Standard"})

    async def test_delete_refuses_when_in_use(
        self, session: AsyncSession, structure, employees
    ):
        service = SalaryStructureService(session)
        await service.apply_to_employee(employees["alice"].employee_id, structure.structure_id)

        with pytest.raises(InUseError):
            await service.delete_structure(structure.structure_id)

    async def test_delete(self, session: AsyncSession, structure):
        service = SalaryStructureService(session)

        await service.delete_structure(structure.structure_id)

        assert await service.list_structures() == []


class TestApplication:
    """Test applying structures to employees."""

    async def test_calculate(self, session: AsyncSession, structure, employees):
        preview = await SalaryStructureService(session).calculate_for_employee(
            structure.structure_id, employees["alice"].employee_id
        )

        breakdown = preview.breakdown
        assert breakdown.earnings["basic_wage"] == Decimal("20000")
        assert breakdown.earnings["house_rent_allowance"] == Decimal("10000")
        assert breakdown.totals.earnings_total == Decimal("37625")
        assert breakdown.totals.deductions_total == Decimal("6575")
        assert breakdown.totals.net_pay == Decimal("31050")

    async def test_calculate_with_overtime(self, session: AsyncSession, structure, employees):
        preview = await SalaryStructureService(session).calculate_for_employee(
            structure.structure_id,
            employees["alice"].employee_id,
            overtime_hours=60,
            hourly_rate=100,
        )

        # capped at 50 hours, 1.5x rate
        assert preview.breakdown.earnings["overtime"] == Decimal("7500")

    async def test_apply_sets_structure(self, session: AsyncSession, structure, employees):
        alice = employees["alice"]

        preview = await SalaryStructureService(session).apply_to_employee(
            alice.employee_id, structure.structure_id
        )

        assert alice.salary_structure_id == structure.structure_id
        assert preview.breakdown.totals.net_pay == Decimal("31050")

    async def test_apply_not_applicable(self, session: AsyncSession, employees):
        service = SalaryStructureService(session)
        sales = await service.create_structure(
            name="Sales", applicable_to="department", applicable_values=["Sales"]
        )

        with pytest.raises(NotApplicableError):
            await service.apply_to_employee(employees["alice"].employee_id, sales.structure_id)

    async def test_applicable_structures(self, session: AsyncSession, structure, employees):
        service = SalaryStructureService(session)
        await service.create_structure(
            name="Level 3", applicable_to="level", applicable_values=["3"]
        )
        await service.create_structure(
            name="Sales", applicable_to="department", applicable_values=["Sales"]
        )

        employee, structures = await service.applicable_structures(
            employees["alice"].employee_id
        )

        assert employee.employee_code == "EMP001"
        assert [s.name for s in structures] == ["Level 3", "Standard"]

    async def test_generate_payroll(self, session: AsyncSession, structure, employees):
        service = SalaryStructureService(session)

        record = await service.generate_payroll(
            employees["alice"].employee_id, structure.structure_id, "June", 2024
        )

        assert record.month == "June"
        assert record.basic_wage == Decimal("20000")
        assert record.in_hand_salary == Decimal("31050")
        assert record.basic_salary == Decimal("50000")

        with pytest.raises(DuplicateError):
            await service.generate_payroll(
                employees["alice"].employee_id, structure.structure_id, "June", 2024
            )
