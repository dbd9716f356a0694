"""Salary structure endpoints."""

from decimal import Decimal
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from hr_payroll.api.dependencies import DbSession
from hr_payroll.api.schemas import (
    ApplicableStructuresResponse,
    ApplyStructureRequest,
    EmployeeBrief,
    ErrorResponse,
    GeneratePayrollRequest,
    MessageResponse,
    PayrollResponse,
    SalaryPreviewResponse,
    SalaryStructureCreate,
    SalaryStructureResponse,
    SalaryStructureUpdate,
)
from hr_payroll.services.salary_structure_service import SalaryStructureService

router = APIRouter(prefix="/admin/salary-structure", tags=["salary-structures"])


def _rule_groups(payload: SalaryStructureCreate | SalaryStructureUpdate) -> dict:
    return payload.model_dump(
        include={"earnings", "deductions", "bonuses", "overtime"},
        exclude_none=True,
        mode="json",
    )


@router.post(
    "",
    response_model=SalaryStructureResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_structure(
    db: DbSession,
    payload: SalaryStructureCreate,
) -> SalaryStructureResponse:
    """Create a salary structure."""
    structure = await SalaryStructureService(db).create_structure(
        name=payload.name,
        description=payload.description,
        applicable_to=payload.applicable_to,
        applicable_values=payload.applicable_values,
        is_active=payload.is_active,
        **_rule_groups(payload),
    )
    await db.commit()
    return SalaryStructureResponse.model_validate(structure)


@router.get("", response_model=list[SalaryStructureResponse])
async def list_structures(
    db: DbSession,
    is_active: Annotated[bool | None, Query()] = None,
) -> list[SalaryStructureResponse]:
    """List salary structures, optionally only active or inactive ones."""
    structures = await SalaryStructureService(db).list_structures(is_active=is_active)
    return [SalaryStructureResponse.model_validate(s) for s in structures]


@router.post(
    "/apply",
    response_model=SalaryPreviewResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def apply_structure(
    db: DbSession,
    payload: ApplyStructureRequest,
) -> SalaryPreviewResponse:
    """Assign a structure to an employee it applies to."""
    preview = await SalaryStructureService(db).apply_to_employee(
        payload.employee_id, payload.structure_id
    )
    await db.commit()
    return SalaryPreviewResponse.from_preview(preview)


@router.get(
    "/calculate/{structure_id}/{employee_id}",
    response_model=SalaryPreviewResponse,
    responses={404: {"model": ErrorResponse}},
)
async def calculate_salary(
    db: DbSession,
    structure_id: Annotated[UUID, Path()],
    employee_id: Annotated[UUID, Path()],
    overtime_hours: Annotated[Decimal | None, Query()] = None,
    hourly_rate: Annotated[Decimal | None, Query()] = None,
) -> SalaryPreviewResponse:
    """Preview the salary a structure gives an employee."""
    preview = await SalaryStructureService(db).calculate_for_employee(
        structure_id,
        employee_id,
        overtime_hours=overtime_hours,
        hourly_rate=hourly_rate,
    )
    return SalaryPreviewResponse.from_preview(preview)


@router.post(
    "/generate-payroll",
    response_model=PayrollResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_payroll(
    db: DbSession,
    payload: GeneratePayrollRequest,
) -> PayrollResponse:
    """Create a period's payroll from a structure."""
    record = await SalaryStructureService(db).generate_payroll(
        payload.employee_id, payload.structure_id, payload.month, payload.year
    )
    await db.commit()
    return PayrollResponse.from_record(record)


@router.get(
    "/applicable/{employee_id}",
    response_model=ApplicableStructuresResponse,
    responses={404: {"model": ErrorResponse}},
)
async def applicable_structures(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
) -> ApplicableStructuresResponse:
    """Active structures that apply to an employee."""
    employee, structures = await SalaryStructureService(db).applicable_structures(employee_id)
    return ApplicableStructuresResponse(
        employee=EmployeeBrief.model_validate(employee),
        structures=[SalaryStructureResponse.model_validate(s) for s in structures],
    )


@router.get(
    "/{structure_id}",
    response_model=SalaryStructureResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_structure(
    db: DbSession,
    structure_id: Annotated[UUID, Path()],
) -> SalaryStructureResponse:
    structure = await SalaryStructureService(db).get_structure(structure_id)
    return SalaryStructureResponse.model_validate(structure)


@router.put(
    "/{structure_id}",
    response_model=SalaryStructureResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_structure(
    db: DbSession,
    structure_id: Annotated[UUID, Path()],
    payload: SalaryStructureUpdate,
) -> SalaryStructureResponse:
    """Partially update a structure."""
    updates = payload.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    structure = await SalaryStructureService(db).update_structure(structure_id, updates)
    await db.commit()
    return SalaryStructureResponse.model_validate(structure)


@router.delete(
    "/{structure_id}",
    response_model=MessageResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_structure(
    db: DbSession,
    structure_id: Annotated[UUID, Path()],
) -> MessageResponse:
    """Delete a structure no employee uses."""
    await SalaryStructureService(db).delete_structure(structure_id)
    await db.commit()
    return MessageResponse(message="Salary structure deleted successfully")
