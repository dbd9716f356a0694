"""HR payroll services."""

from hr_payroll.services.disbursement_service import DisbursementService, DisbursementSummary
from hr_payroll.services.id_card_service import IdCardService
from hr_payroll.services.payroll_service import PayrollService
from hr_payroll.services.salary_structure_service import SalaryStructureService

__all__ = [
    "PayrollService",
    "SalaryStructureService",
    "DisbursementService",
    "DisbursementSummary",
    "IdCardService",
]
