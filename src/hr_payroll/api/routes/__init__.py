"""API routes."""

from hr_payroll.api.routes.employee_payroll import router as employee_payroll_router
from hr_payroll.api.routes.health import router as health_router
from hr_payroll.api.routes.id_cards import router as id_cards_router
from hr_payroll.api.routes.payroll import router as payroll_router
from hr_payroll.api.routes.salary_structures import router as salary_structures_router

__all__ = [
    "health_router",
    "payroll_router",
    "salary_structures_router",
    "id_cards_router",
    "employee_payroll_router",
]
