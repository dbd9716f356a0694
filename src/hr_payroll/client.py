"""HTTP client for the HR payroll API.

Every response is validated against exactly one schema from
``hr_payroll.api.schemas``. A body that does not match raises
ApiResponseError; there is no fallback parsing.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, TypeVar
from uuid import UUID

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from hr_payroll.api.schemas import (
    ApplicableStructuresResponse,
    BulkGenerateResponse,
    DisbursementResponse,
    MessageResponse,
    PayrollCreate,
    PayrollHistoryResponse,
    PayrollResponse,
    PayrollSummaryResponse,
    PayrollUpdate,
    SalaryPreviewResponse,
    SalaryStructureCreate,
    SalaryStructureResponse,
    SalaryStructureUpdate,
)

T = TypeVar("T")


class HrPayrollClientError(Exception):
    """Base class for client failures."""


class ApiConnectionError(HrPayrollClientError):
    """The API could not be reached."""


class ApiStatusError(HrPayrollClientError):
    """The API answered with an error status."""

    def __init__(self, status_code: int, detail: str, code: str | None = None):
        self.status_code = status_code
        self.detail = detail
        self.code = code
        super().__init__(f"HTTP {status_code}: {detail}")


class ApiClientError(ApiStatusError):
    """The API rejected the request (4xx)."""


class ApiServerError(ApiStatusError):
    """The API failed to handle the request (5xx)."""


class ApiResponseError(HrPayrollClientError):
    """The response body did not match the expected schema."""


@dataclass(frozen=True)
class SessionContext:
    """Where to reach the API and how to authenticate."""

    base_url: str
    token: str | None = None

    def headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}


def _error_detail(response: httpx.Response) -> tuple[str, str | None]:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, None
    if isinstance(body, dict):
        detail = body.get("detail", response.reason_phrase)
        return (detail if isinstance(detail, str) else str(detail)), body.get("code")
    return str(body), None


class HrPayrollClient:
    """Synchronous client for the admin payroll and salary structure API."""

    def __init__(
        self,
        context: SessionContext,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.context = context
        self._http = httpx.Client(
            base_url=context.base_url,
            headers=context.headers(),
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> HrPayrollClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Transport
    # ------------------------------------------------------------------

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.TransportError as e:
            raise ApiConnectionError(f"Could not reach {self.context.base_url}: {e}") from e

        if response.status_code >= 500:
            raise ApiServerError(response.status_code, *_error_detail(response))
        if response.status_code >= 400:
            raise ApiClientError(response.status_code, *_error_detail(response))
        return response

    def _request(self, schema: type[T], method: str, path: str, **kwargs: Any) -> T:
        response = self._send(method, path, **kwargs)
        try:
            return TypeAdapter(schema).validate_json(response.content)
        except ValidationError as e:
            raise ApiResponseError(
                f"Unexpected response from {method} {path}: {e.error_count()} error(s)"
            ) from e

    @staticmethod
    def _body(model: BaseModel) -> dict[str, Any]:
        return model.model_dump(mode="json", exclude_none=True)

    # ------------------------------------------------------------------
    # Payroll
    # ------------------------------------------------------------------

    def list_payrolls(self, month: str, year: int) -> list[PayrollSummaryResponse]:
        return self._request(
            list[PayrollSummaryResponse],
            "GET",
            "/admin/payroll",
            params={"month": month, "year": year},
        )

    def create_payroll(self, payload: PayrollCreate) -> PayrollResponse:
        return self._request(
            PayrollResponse, "POST", "/admin/payroll/create-payroll", json=self._body(payload)
        )

    def generate_bulk(
        self, month: str, year: int, structure_id: UUID | None = None
    ) -> BulkGenerateResponse:
        body: dict[str, Any] = {"month": month, "year": year}
        if structure_id is not None:
            body["structure_id"] = str(structure_id)
        return self._request(
            BulkGenerateResponse, "POST", "/admin/payroll/generate-bulk", json=body
        )

    def update_payroll(self, payroll_id: UUID, payload: PayrollUpdate) -> PayrollResponse:
        return self._request(
            PayrollResponse,
            "PUT",
            f"/admin/payroll/update-payroll/{payroll_id}",
            json=self._body(payload),
        )

    def toggle_visibility(self, payroll_id: UUID, is_visible: bool) -> PayrollResponse:
        return self._request(
            PayrollResponse,
            "PATCH",
            f"/admin/payroll/toggle-visibility/{payroll_id}",
            json={"is_visible": is_visible},
        )

    def employee_history(
        self, employee_id: UUID, page: int = 1, limit: int = 12
    ) -> PayrollHistoryResponse:
        return self._request(
            PayrollHistoryResponse,
            "GET",
            f"/admin/payroll/admin-employee-payroll/{employee_id}",
            params={"page": page, "limit": limit},
        )

    def current_payroll(self, employee_id: UUID) -> PayrollResponse:
        return self._request(
            PayrollResponse, "GET", f"/admin/payroll/admin-current-payroll/{employee_id}"
        )

    def period_payroll(self, employee_id: UUID, month: str, year: int) -> PayrollResponse:
        return self._request(
            PayrollResponse,
            "GET",
            f"/admin/payroll/admin-payroll/{employee_id}/{month}/{year}",
        )

    def disburse(self, month: str, year: int) -> DisbursementResponse:
        return self._request(
            DisbursementResponse,
            "POST",
            "/admin/payroll/disburse",
            json={"month": month, "year": year},
        )

    def disbursement_report(self, month: str, year: int, fmt: str = "csv") -> bytes:
        """Raw report file contents."""
        response = self._send(
            "GET",
            "/admin/payroll/disbursement-report",
            params={"month": month, "year": year, "format": fmt},
        )
        return response.content

    # ------------------------------------------------------------------
    # Salary structures
    # ------------------------------------------------------------------

    def list_structures(self, is_active: bool | None = None) -> list[SalaryStructureResponse]:
        params = {} if is_active is None else {"is_active": str(is_active).lower()}
        return self._request(
            list[SalaryStructureResponse], "GET", "/admin/salary-structure", params=params
        )

    def get_structure(self, structure_id: UUID) -> SalaryStructureResponse:
        return self._request(
            SalaryStructureResponse, "GET", f"/admin/salary-structure/{structure_id}"
        )

    def create_structure(self, payload: SalaryStructureCreate) -> SalaryStructureResponse:
        return self._request(
            SalaryStructureResponse,
            "POST",
            "/admin/salary-structure",
            json=self._body(payload),
        )

    def update_structure(
        self, structure_id: UUID, payload: SalaryStructureUpdate
    ) -> SalaryStructureResponse:
        return self._request(
            SalaryStructureResponse,
            "PUT",
            f"/admin/salary-structure/{structure_id}",
            json=self._body(payload),
        )

    def delete_structure(self, structure_id: UUID) -> MessageResponse:
        return self._request(
            MessageResponse, "DELETE", f"/admin/salary-structure/{structure_id}"
        )

    def apply_structure(self, employee_id: UUID, structure_id: UUID) -> SalaryPreviewResponse:
        return self._request(
            SalaryPreviewResponse,
            "POST",
            "/admin/salary-structure/apply",
            json={"employee_id": str(employee_id), "structure_id": str(structure_id)},
        )

    def calculate_salary(
        self,
        structure_id: UUID,
        employee_id: UUID,
        overtime_hours: Decimal | None = None,
        hourly_rate: Decimal | None = None,
    ) -> SalaryPreviewResponse:
        params = {}
        if overtime_hours is not None:
            params["overtime_hours"] = str(overtime_hours)
        if hourly_rate is not None:
            params["hourly_rate"] = str(hourly_rate)
        return self._request(
            SalaryPreviewResponse,
            "GET",
            f"/admin/salary-structure/calculate/{structure_id}/{employee_id}",
            params=params,
        )

    def generate_payroll_with_structure(
        self, employee_id: UUID, structure_id: UUID, month: str, year: int
    ) -> PayrollResponse:
        return self._request(
            PayrollResponse,
            "POST",
            "/admin/salary-structure/generate-payroll",
            json={
                "employee_id": str(employee_id),
                "structure_id": str(structure_id),
                "month": month,
                "year": year,
            },
        )

    def applicable_structures(self, employee_id: UUID) -> ApplicableStructuresResponse:
        return self._request(
            ApplicableStructuresResponse,
            "GET",
            f"/admin/salary-structure/applicable/{employee_id}",
        )
