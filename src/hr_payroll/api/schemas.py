"""Pydantic schemas for API request/response models.

The HTTP client validates responses against these same models.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Literal
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from hr_payroll.models import IdCard, PayrollRecord
    from hr_payroll.services.salary_structure_service import SalaryPreview

PayrollStatusValue = Literal["Pending", "Processed", "Paid"]
ApplicableTo = Literal["all", "department", "position", "level"]
CardType = Literal["employee", "visitor", "contractor", "temporary"]
CardStatus = Literal["active", "expired", "suspended", "cancelled"]
AccessLevel = Literal["basic", "standard", "premium", "admin"]
CardTemplate = Literal["standard", "corporate", "executive", "modern", "professional"]


class ErrorResponse(BaseModel):
    """Error body returned for every handled failure."""

    detail: str
    code: str


class MessageResponse(BaseModel):
    message: str


# ============================================================================
# Employee schemas
# ============================================================================


class EmployeeBrief(BaseModel):
    """Employee fields embedded in other responses."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_code: str
    name: str = Field(validation_alias=AliasChoices("name", "full_name"))
    email: str
    department: str | None = None
    position: str | None = None
    role_level: int | None = None
    salary: Decimal | None = None


# ============================================================================
# Payroll schemas
# ============================================================================


class EarningsInput(BaseModel):
    """Earning amounts. Omitted fields are left untouched on update."""

    model_config = ConfigDict(extra="forbid")

    basic_wage: Decimal | None = None
    house_rent_allowance: Decimal | None = None
    transport_allowance: Decimal | None = None
    medical_allowance: Decimal | None = None
    overtime: Decimal | None = None
    gratuity: Decimal | None = None
    special_allowance: Decimal | None = None
    performance_bonus: Decimal | None = None
    project_bonus: Decimal | None = None
    attendance_bonus: Decimal | None = None
    pf_employer: Decimal | None = None
    esi_employer: Decimal | None = None


class DeductionsInput(BaseModel):
    """Deduction amounts. Omitted fields are left untouched on update."""

    model_config = ConfigDict(extra="forbid")

    pf_employee: Decimal | None = None
    esi_employee: Decimal | None = None
    professional_tax: Decimal | None = None
    income_tax: Decimal | None = None
    advance_salary: Decimal | None = None
    loan_deduction: Decimal | None = None
    other_deductions: Decimal | None = None


class PayrollCreate(BaseModel):
    """Schema for creating a payroll by hand."""

    employee_id: UUID
    month: str
    year: int
    basic_salary: Decimal | None = None
    earnings: EarningsInput = Field(default_factory=EarningsInput)
    deductions: DeductionsInput = Field(default_factory=DeductionsInput)
    status: PayrollStatusValue = "Pending"
    notes: str | None = Field(default=None, max_length=500)
    is_visible: bool = True


class PayrollUpdate(BaseModel):
    """Schema for editing a payroll."""

    basic_salary: Decimal | None = None
    earnings: EarningsInput | None = None
    deductions: DeductionsInput | None = None
    status: PayrollStatusValue | None = None
    notes: str | None = Field(default=None, max_length=500)
    is_visible: bool | None = None


class VisibilityUpdate(BaseModel):
    is_visible: bool


class PayrollResponse(BaseModel):
    """Schema for a payroll record."""

    payroll_id: UUID
    employee_id: UUID
    employee: EmployeeBrief
    month: str
    year: int
    basic_salary: Decimal
    earnings: dict[str, Decimal]
    deductions: dict[str, Decimal]
    total_earnings: Decimal
    total_deductions: Decimal
    ctc: Decimal
    in_hand_salary: Decimal
    status: PayrollStatusValue
    is_visible: bool
    notes: str | None = None
    processed_date: date | None = None
    paid_date: date | None = None
    payment_provider: str | None = None
    payment_reference: str | None = None
    payment_status: str | None = None
    payment_processed_at: datetime | None = None
    payment_error: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_record(cls, record: PayrollRecord) -> PayrollResponse:
        return cls(
            **{name: getattr(record, name) for name in _PAYROLL_COLUMNS},
            employee=EmployeeBrief.model_validate(record.employee),
            earnings=record.earnings_map(),
            deductions=record.deductions_map(),
        )


_PAYROLL_COLUMNS = tuple(
    name
    for name in PayrollResponse.model_fields
    if name not in ("employee", "earnings", "deductions")
)


class PayrollSummaryResponse(BaseModel):
    """One employee's row in the month overview."""

    model_config = ConfigDict(from_attributes=True)

    employee_id: UUID
    employee_code: str
    name: str
    department: str | None = None
    position: str | None = None
    basic_salary: Decimal
    ctc: Decimal
    in_hand_salary: Decimal
    total_earnings: Decimal
    total_deductions: Decimal
    status: Literal["Pending", "Processed", "Paid", "Not Generated"]
    is_visible: bool
    payroll_id: UUID | None = None


class PayrollHistoryResponse(BaseModel):
    """A page of an employee's payrolls."""

    payrolls: list[PayrollResponse]
    total: int
    total_pages: int
    current_page: int


class BulkGenerateRequest(BaseModel):
    month: str
    year: int
    structure_id: UUID | None = None


class BulkGenerateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    month: str
    year: int
    created: int
    skipped: int
    payroll_ids: list[UUID]


class PayslipResponse(BaseModel):
    """Payslip data an employee can download."""

    payroll_id: UUID
    employee: EmployeeBrief
    period: dict[str, str | int]
    basic_salary: Decimal
    earnings: dict[str, Decimal]
    deductions: dict[str, Decimal]
    total_earnings: Decimal
    total_deductions: Decimal
    ctc: Decimal
    in_hand_salary: Decimal
    status: PayrollStatusValue
    processed_date: date | None = None
    paid_date: date | None = None


# ============================================================================
# Disbursement schemas
# ============================================================================


class DisburseRequest(BaseModel):
    month: str
    year: int


class DisbursementResultItem(BaseModel):
    """Outcome of one payout."""

    payroll_id: UUID
    employee_name: str
    employee_email: str
    amount: Decimal
    status: Literal["Success", "Failed", "Pending"]
    reference: str | None = None
    error: str | None = None


class DisbursementResponse(BaseModel):
    """Outcome of a disbursement run."""

    success: bool
    month: str
    year: int
    total: int
    paid: int
    failed: int
    results: list[DisbursementResultItem]


# ============================================================================
# Salary structure schemas
# ============================================================================


class FieldRuleSchema(BaseModel):
    is_percentage: bool = True
    percentage: Decimal = Decimal("0")
    fixed_amount: Decimal = Decimal("0")


class BonusRuleSchema(BaseModel):
    enabled: bool = False
    percentage: Decimal = Decimal("0")
    max_amount: Decimal = Decimal("0")


class OvertimeRuleSchema(BaseModel):
    enabled: bool = True
    rate: Decimal = Decimal("1.5")
    max_hours_per_day: Decimal = Decimal("4")
    max_hours_per_month: Decimal = Decimal("50")


class SalaryStructureCreate(BaseModel):
    """Schema for creating a salary structure."""

    name: str = Field(min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    applicable_to: ApplicableTo = "all"
    applicable_values: list[str] = Field(default_factory=list)
    is_active: bool = True
    earnings: dict[str, FieldRuleSchema] = Field(default_factory=dict)
    deductions: dict[str, FieldRuleSchema] = Field(default_factory=dict)
    bonuses: dict[str, BonusRuleSchema] = Field(default_factory=dict)
    overtime: OvertimeRuleSchema | None = None


class SalaryStructureUpdate(BaseModel):
    """Partial update of a salary structure."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, max_length=500)
    applicable_to: ApplicableTo | None = None
    applicable_values: list[str] | None = None
    is_active: bool | None = None
    earnings: dict[str, FieldRuleSchema] | None = None
    deductions: dict[str, FieldRuleSchema] | None = None
    bonuses: dict[str, BonusRuleSchema] | None = None
    overtime: OvertimeRuleSchema | None = None


class SalaryStructureResponse(BaseModel):
    """Schema for a salary structure."""

    model_config = ConfigDict(from_attributes=True)

    structure_id: UUID
    name: str
    description: str | None = None
    is_active: bool
    applicable_to: ApplicableTo
    applicable_values: list[str]
    earnings: dict[str, FieldRuleSchema]
    deductions: dict[str, FieldRuleSchema]
    bonuses: dict[str, BonusRuleSchema]
    overtime: OvertimeRuleSchema
    created_at: datetime
    updated_at: datetime


class ApplyStructureRequest(BaseModel):
    employee_id: UUID
    structure_id: UUID


class GeneratePayrollRequest(BaseModel):
    employee_id: UUID
    structure_id: UUID
    month: str
    year: int


class SalaryBreakdownSchema(BaseModel):
    """Calculated salary for one employee."""

    earnings: dict[str, Decimal]
    deductions: dict[str, Decimal]
    total_earnings: Decimal
    total_deductions: Decimal
    net_salary: Decimal


class SalaryPreviewResponse(BaseModel):
    """A structure applied to an employee."""

    employee: EmployeeBrief
    structure_id: UUID
    structure_name: str
    calculated_salary: SalaryBreakdownSchema

    @classmethod
    def from_preview(cls, preview: SalaryPreview) -> SalaryPreviewResponse:
        return cls(
            employee=EmployeeBrief.model_validate(preview.employee),
            structure_id=preview.structure.structure_id,
            structure_name=preview.structure.name,
            calculated_salary=SalaryBreakdownSchema(**preview.breakdown.to_dict()),
        )


class ApplicableStructuresResponse(BaseModel):
    employee: EmployeeBrief
    structures: list[SalaryStructureResponse]


# ============================================================================
# ID card schemas
# ============================================================================


class CardDesign(BaseModel):
    """Card theme. Colors default to the template's preset."""

    template: CardTemplate = "standard"
    background_color: str | None = None
    text_color: str | None = None
    accent_color: str | None = None
    border_color: str | None = None
    company_name: str | None = None
    company_address: str | None = None


class IdCardGenerate(BaseModel):
    """Schema for issuing an ID card."""

    employee_id: UUID
    expiry_date: date
    card_design: CardDesign = Field(default_factory=CardDesign)
    card_type: CardType = "employee"
    access_level: AccessLevel = "basic"
    access_zones: list[str] = Field(default_factory=list)


class IdCardUpdate(BaseModel):
    """Partial update of an ID card."""

    expiry_date: date | None = None
    status: CardStatus | None = None
    card_type: CardType | None = None
    access_level: AccessLevel | None = None
    access_zones: list[str] | None = None
    template: CardTemplate | None = None
    background_color: str | None = None
    text_color: str | None = None
    accent_color: str | None = None
    border_color: str | None = None
    company_name: str | None = None
    company_address: str | None = None


class IdCardResponse(BaseModel):
    """Schema for an ID card."""

    card_id: UUID
    card_number: str
    employee: EmployeeBrief
    card_type: CardType
    issue_date: date
    expiry_date: date
    status: CardStatus
    effective_status: CardStatus
    is_valid: bool
    access_level: AccessLevel
    access_zones: list[str]
    qr_data: str | None = None
    template: CardTemplate
    background_color: str
    text_color: str
    accent_color: str
    border_color: str
    company_name: str
    company_address: str

    @classmethod
    def from_card(cls, card: IdCard) -> IdCardResponse:
        return cls(
            card_id=card.card_id,
            card_number=card.card_number,
            employee=EmployeeBrief.model_validate(card.employee),
            card_type=card.card_type,
            issue_date=card.issue_date,
            expiry_date=card.expiry_date,
            status=card.status,
            effective_status=card.effective_status(),
            is_valid=card.is_valid(),
            access_level=card.access_level,
            access_zones=card.access_zones,
            qr_data=card.qr_data,
            template=card.template,
            background_color=card.background_color,
            text_color=card.text_color,
            accent_color=card.accent_color,
            border_color=card.border_color,
            company_name=card.company_name,
            company_address=card.company_address,
        )
