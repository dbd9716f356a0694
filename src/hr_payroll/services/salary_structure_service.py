"""Salary structure service."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.calculators.structure import SalaryStructureApplier
from hr_payroll.calculators.types import Amount, Applicability, SalaryBreakdown, StructureRules
from hr_payroll.errors import (
    DuplicateError,
    InUseError,
    InvalidInputError,
    NotApplicableError,
    NotFoundError,
)
from hr_payroll.models import Employee, PayrollRecord, SalaryStructure
from hr_payroll.services.payroll_service import PayrollService

logger = logging.getLogger(__name__)

RULE_GROUPS = ("earnings", "deductions", "bonuses", "overtime")


@dataclass(frozen=True)
class SalaryPreview:
    """A structure applied to one employee, without persisting anything."""

    employee: Employee
    structure: SalaryStructure
    breakdown: SalaryBreakdown


def _check_applicable_to(value: str) -> str:
    try:
        return Applicability(value).value
    except ValueError as e:
        raise InvalidInputError(f"Unknown applicability: {value}") from e


def _build_rules(groups: Mapping[str, Any]) -> StructureRules:
    try:
        return StructureRules.from_dicts(
            earnings=groups.get("earnings"),
            deductions=groups.get("deductions"),
            bonuses=groups.get("bonuses"),
            overtime=groups.get("overtime"),
        )
    except (ValueError, ArithmeticError) as e:
        raise InvalidInputError(f"Invalid salary structure rules: {e}") from e


class SalaryStructureService:
    """CRUD for salary structures and their application to employees."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.payroll_service = PayrollService(session)

    async def get_structure(self, structure_id: UUID) -> SalaryStructure:
        structure = await self.session.get(SalaryStructure, structure_id)
        if structure is None:
            raise NotFoundError("Salary structure", structure_id)
        return structure

    async def create_structure(
        self,
        name: str,
        description: str | None = None,
        applicable_to: str = Applicability.ALL.value,
        applicable_values: Sequence[str] = (),
        is_active: bool = True,
        earnings: Mapping[str, Any] | None = None,
        deductions: Mapping[str, Any] | None = None,
        bonuses: Mapping[str, Any] | None = None,
        overtime: Mapping[str, Any] | None = None,
    ) -> SalaryStructure:
        """Create a structure. Rules not given keep their defaults.

        Raises:
            DuplicateError: If the name is already taken.
        """
        await self._ensure_name_free(name)
        rules = _build_rules(
            {
                "earnings": earnings,
                "deductions": deductions,
                "bonuses": bonuses,
                "overtime": overtime,
            }
        )
        structure = SalaryStructure(
            name=name,
            description=description,
            applicable_to=_check_applicable_to(applicable_to),
            applicable_values=list(applicable_values),
            is_active=is_active,
        )
        structure.set_rules(rules)
        self.session.add(structure)
        await self.session.flush()
        logger.info("Created salary structure %s (%s)", structure.name, structure.structure_id)
        return structure

    async def list_structures(self, is_active: bool | None = None) -> list[SalaryStructure]:
        query = select(SalaryStructure).order_by(SalaryStructure.name)
        if is_active is not None:
            query = query.where(SalaryStructure.is_active.is_(is_active))
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def update_structure(
        self,
        structure_id: UUID,
        updates: Mapping[str, Any],
    ) -> SalaryStructure:
        """Apply a partial update.

        Rule groups are merged field by field into the stored rules.
        """
        structure = await self.get_structure(structure_id)

        name = updates.get("name")
        if name is not None and name != structure.name:
            await self._ensure_name_free(name)
            structure.name = name
        if "description" in updates:
            structure.description = updates["description"]
        if updates.get("applicable_to") is not None:
            structure.applicable_to = _check_applicable_to(updates["applicable_to"])
        if updates.get("applicable_values") is not None:
            structure.applicable_values = list(updates["applicable_values"])
        if updates.get("is_active") is not None:
            structure.is_active = updates["is_active"]

        if any(updates.get(group) is not None for group in RULE_GROUPS):
            merged = {
                "earnings": {**structure.earnings, **(updates.get("earnings") or {})},
                "deductions": {**structure.deductions, **(updates.get("deductions") or {})},
                "bonuses": {**structure.bonuses, **(updates.get("bonuses") or {})},
                "overtime": {**structure.overtime, **(updates.get("overtime") or {})},
            }
            structure.set_rules(_build_rules(merged))

        await self.session.flush()
        return structure

    async def delete_structure(self, structure_id: UUID) -> None:
        """Delete a structure no employee references.

        Raises:
            InUseError: If any employee has the structure applied.
        """
        structure = await self.get_structure(structure_id)
        in_use = (
            await self.session.execute(
                select(func.count())
                .select_from(Employee)
                .where(Employee.salary_structure_id == structure_id)
            )
        ).scalar_one()
        if in_use:
            raise InUseError(
                f"Cannot delete salary structure. It is being used by {in_use} employee(s)."
            )
        await self.session.delete(structure)
        await self.session.flush()
        logger.info("Deleted salary structure %s", structure_id)

    async def apply_to_employee(self, employee_id: UUID, structure_id: UUID) -> SalaryPreview:
        """Assign a structure to an employee after checking applicability.

        Raises:
            NotApplicableError: If the structure does not cover the employee.
        """
        employee = await self.payroll_service.get_employee(employee_id)
        structure = await self.get_structure(structure_id)
        if not SalaryStructureApplier.is_applicable(
            structure.applicable_to, structure.applicable_values, employee
        ):
            raise NotApplicableError(
                "This salary structure is not applicable to this employee"
            )
        employee.salary_structure_id = structure.structure_id
        await self.session.flush()
        return SalaryPreview(
            employee=employee,
            structure=structure,
            breakdown=SalaryStructureApplier.apply(structure.rules, employee.salary),
        )

    async def calculate_for_employee(
        self,
        structure_id: UUID,
        employee_id: UUID,
        overtime_hours: Amount = None,
        hourly_rate: Amount = None,
    ) -> SalaryPreview:
        """Preview the breakdown a structure gives an employee."""
        employee = await self.payroll_service.get_employee(employee_id)
        structure = await self.get_structure(structure_id)
        breakdown = SalaryStructureApplier.apply(
            structure.rules,
            employee.salary,
            overtime_hours=overtime_hours,
            hourly_rate=hourly_rate,
        )
        return SalaryPreview(employee=employee, structure=structure, breakdown=breakdown)

    async def generate_payroll(
        self,
        employee_id: UUID,
        structure_id: UUID,
        month: str,
        year: int,
    ) -> PayrollRecord:
        """Create the period's payroll from a structure.

        Raises:
            DuplicateError: If the period already has a payroll.
        """
        preview = await self.calculate_for_employee(structure_id, employee_id)
        return await self.payroll_service.create_from_breakdown(
            preview.employee, month, year, preview.breakdown
        )

    async def applicable_structures(
        self, employee_id: UUID
    ) -> tuple[Employee, list[SalaryStructure]]:
        """Active structures whose applicability covers the employee."""
        employee = await self.payroll_service.get_employee(employee_id)
        structures = await self.list_structures(is_active=True)
        return employee, [
            s
            for s in structures
            if SalaryStructureApplier.is_applicable(s.applicable_to, s.applicable_values, employee)
        ]

    async def _ensure_name_free(self, name: str) -> None:
        result = await self.session.execute(
            select(SalaryStructure.structure_id).where(SalaryStructure.name == name)
        )
        if result.first() is not None:
            raise DuplicateError(f"Salary structure with name '{name}' already exists")
