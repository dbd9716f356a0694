"""Employee self-service payroll endpoints.

The caller is identified by the X-Employee-ID header. Hidden payrolls are
never returned here.
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query

from hr_payroll.api.dependencies import DbSession, EmployeeId
from hr_payroll.api.schemas import (
    ErrorResponse,
    PayrollHistoryResponse,
    PayrollResponse,
    PayslipResponse,
)
from hr_payroll.errors import NotFoundError
from hr_payroll.models import PayrollRecord
from hr_payroll.services.payroll_service import PayrollService

router = APIRouter(prefix="/employee/payroll", tags=["employee-payroll"])


async def _own_visible_payroll(
    service: PayrollService, employee_id: UUID, payroll_id: UUID
) -> PayrollRecord:
    record = await service.get_payroll(payroll_id)
    if record.employee_id != employee_id or not record.is_visible:
        raise NotFoundError("Payroll", payroll_id)
    return record


@router.get(
    "/history",
    response_model=PayrollHistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def payroll_history(
    db: DbSession,
    employee_id: EmployeeId,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 12,
) -> PayrollHistoryResponse:
    """The caller's visible payrolls, newest first."""
    result = await PayrollService(db).get_employee_history(
        employee_id, page, limit, visible_only=True
    )
    return PayrollHistoryResponse(
        payrolls=[PayrollResponse.from_record(p) for p in result.payrolls],
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.current_page,
    )


@router.get(
    "/current",
    response_model=PayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def current_payroll(db: DbSession, employee_id: EmployeeId) -> PayrollResponse:
    """The caller's payroll for the current month.

    A missing payroll is created from the default template. A hidden one is
    reported as not found.
    """
    record = await PayrollService(db).get_current_payroll(employee_id)
    await db.commit()
    if not record.is_visible:
        raise NotFoundError("Payroll", f"{employee_id}/{record.month}/{record.year}")
    return PayrollResponse.from_record(record)


@router.get(
    "/details/{payroll_id}",
    response_model=PayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def payroll_details(
    db: DbSession,
    employee_id: EmployeeId,
    payroll_id: Annotated[UUID, Path()],
) -> PayrollResponse:
    record = await _own_visible_payroll(PayrollService(db), employee_id, payroll_id)
    return PayrollResponse.from_record(record)


@router.get(
    "/download/{payroll_id}",
    response_model=PayslipResponse,
    responses={404: {"model": ErrorResponse}},
)
async def download_payslip(
    db: DbSession,
    employee_id: EmployeeId,
    payroll_id: Annotated[UUID, Path()],
) -> PayslipResponse:
    """Payslip data for one of the caller's payrolls."""
    record = await _own_visible_payroll(PayrollService(db), employee_id, payroll_id)
    return PayslipResponse.model_validate(PayrollService.payslip(record))
