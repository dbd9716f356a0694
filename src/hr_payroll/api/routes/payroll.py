"""Admin payroll endpoints."""

from typing import Annotated, Literal
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hr_payroll.api.dependencies import AppSettings, DbSession, PaymentProvider
from hr_payroll.api.schemas import (
    BulkGenerateRequest,
    BulkGenerateResponse,
    DisbursementResponse,
    DisburseRequest,
    ErrorResponse,
    PayrollCreate,
    PayrollHistoryResponse,
    PayrollResponse,
    PayrollSummaryResponse,
    PayrollUpdate,
    VisibilityUpdate,
)
from hr_payroll.reporting import render_csv, render_pdf, report_filename
from hr_payroll.services.disbursement_service import DisbursementService
from hr_payroll.services.payroll_service import PayrollService

router = APIRouter(prefix="/admin/payroll", tags=["payroll"])


# ============================================================================
# Month overview and record CRUD
# ============================================================================


@router.get(
    "",
    response_model=list[PayrollSummaryResponse],
    responses={400: {"model": ErrorResponse}},
)
async def list_month_payrolls(
    db: DbSession,
    month: Annotated[str, Query()],
    year: Annotated[int, Query()],
) -> list[PayrollSummaryResponse]:
    """Payroll overview of every salaried employee for a month."""
    summaries = await PayrollService(db).list_month_summaries(month, year)
    return [PayrollSummaryResponse.model_validate(s) for s in summaries]


@router.post(
    "/create-payroll",
    response_model=PayrollResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_payroll(db: DbSession, payload: PayrollCreate) -> PayrollResponse:
    """Create a payroll from explicit field values."""
    record = await PayrollService(db).create_payroll(
        payload.employee_id,
        payload.month,
        payload.year,
        earnings=payload.earnings.model_dump(exclude_none=True),
        deductions=payload.deductions.model_dump(exclude_none=True),
        basic_salary=payload.basic_salary,
        status=payload.status,
        notes=payload.notes,
        is_visible=payload.is_visible,
    )
    await db.commit()
    return PayrollResponse.from_record(record)


@router.post(
    "/generate-bulk",
    response_model=BulkGenerateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_bulk(db: DbSession, payload: BulkGenerateRequest) -> BulkGenerateResponse:
    """Generate payrolls for every active salaried employee lacking one."""
    result = await PayrollService(db).generate_bulk(
        payload.month, payload.year, structure_id=payload.structure_id
    )
    await db.commit()
    return BulkGenerateResponse.model_validate(result)


@router.put(
    "/update-payroll/{payroll_id}",
    response_model=PayrollResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_payroll(
    db: DbSession,
    payroll_id: Annotated[UUID, Path()],
    payload: PayrollUpdate,
) -> PayrollResponse:
    """Persist an edited payroll. Totals are recomputed."""
    record = await PayrollService(db).update_payroll(
        payroll_id,
        earnings=payload.earnings.model_dump(exclude_none=True) if payload.earnings else None,
        deductions=(
            payload.deductions.model_dump(exclude_none=True) if payload.deductions else None
        ),
        status=payload.status,
        notes=payload.notes,
        is_visible=payload.is_visible,
        basic_salary=payload.basic_salary,
    )
    await db.commit()
    return PayrollResponse.from_record(record)


@router.patch(
    "/toggle-visibility/{payroll_id}",
    response_model=PayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def toggle_visibility(
    db: DbSession,
    payroll_id: Annotated[UUID, Path()],
    payload: VisibilityUpdate,
) -> PayrollResponse:
    """Show or hide a payroll from the employee."""
    record = await PayrollService(db).set_visibility(payroll_id, payload.is_visible)
    await db.commit()
    return PayrollResponse.from_record(record)


# ============================================================================
# Per-employee views
# ============================================================================


@router.get(
    "/admin-employee-payroll/{employee_id}",
    response_model=PayrollHistoryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def employee_payroll_history(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 12,
) -> PayrollHistoryResponse:
    """All payrolls of one employee, newest first."""
    result = await PayrollService(db).get_employee_history(employee_id, page, limit)
    return PayrollHistoryResponse(
        payrolls=[PayrollResponse.from_record(p) for p in result.payrolls],
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.current_page,
    )


@router.get(
    "/admin-current-payroll/{employee_id}",
    response_model=PayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def current_payroll(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
) -> PayrollResponse:
    """Current month's payroll, created from the default template if missing."""
    record = await PayrollService(db).get_current_payroll(employee_id)
    await db.commit()
    return PayrollResponse.from_record(record)


@router.get(
    "/admin-payroll/{employee_id}/{month}/{year}",
    response_model=PayrollResponse,
    responses={404: {"model": ErrorResponse}},
)
async def period_payroll(
    db: DbSession,
    employee_id: Annotated[UUID, Path()],
    month: Annotated[str, Path()],
    year: Annotated[int, Path()],
) -> PayrollResponse:
    """One employee's payroll for a given month."""
    record = await PayrollService(db).get_period_payroll(employee_id, month, year)
    return PayrollResponse.from_record(record)


# ============================================================================
# Disbursement
# ============================================================================


@router.post(
    "/disburse",
    response_model=DisbursementResponse,
    responses={400: {"model": ErrorResponse}},
)
async def disburse(
    db: DbSession,
    settings: AppSettings,
    provider: PaymentProvider,
    payload: DisburseRequest,
) -> DisbursementResponse:
    """Pay out every unpaid payroll of the month."""
    service = DisbursementService(db, provider, currency=settings.payment_currency)
    summary = await service.disburse(payload.month, payload.year)
    await db.commit()
    return DisbursementResponse.model_validate(summary.to_dict())


@router.get(
    "/disbursement-report",
    responses={
        200: {"content": {"text/csv": {}, "application/pdf": {}}},
        400: {"model": ErrorResponse},
    },
)
async def disbursement_report(
    db: DbSession,
    settings: AppSettings,
    provider: PaymentProvider,
    month: Annotated[str, Query()],
    year: Annotated[int, Query()],
    format: Annotated[Literal["csv", "pdf"], Query()] = "csv",
) -> Response:
    """Download the recorded disbursement results as CSV or PDF."""
    service = DisbursementService(db, provider, currency=settings.payment_currency)
    summary = await service.recorded_results(month, year)
    results = [r.to_dict() for r in summary.results]
    filename = report_filename(summary.month, summary.year, format)

    if format == "pdf":
        content = render_pdf(
            results,
            summary.month,
            summary.year,
            {"total": summary.total, "paid": summary.paid, "failed": summary.failed},
        )
        media_type = "application/pdf"
    else:
        content = render_csv(results).encode("utf-8")
        media_type = "text/csv; charset=utf-8"

    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
