"""SQLAlchemy ORM models."""

from hr_payroll.models.base import Base, TimestampMixin
from hr_payroll.models.employee import Employee
from hr_payroll.models.id_card import IdCard
from hr_payroll.models.payroll import DEDUCTION_FIELDS, EARNING_FIELDS, PayrollRecord
from hr_payroll.models.salary_structure import SalaryStructure

__all__ = [
    "Base",
    "TimestampMixin",
    "Employee",
    "PayrollRecord",
    "EARNING_FIELDS",
    "DEDUCTION_FIELDS",
    "SalaryStructure",
    "IdCard",
]
