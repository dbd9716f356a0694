"""Salary structure model."""

from __future__ import annotations

from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, Boolean, CheckConstraint, String
from sqlalchemy.orm import Mapped, mapped_column

from hr_payroll.calculators.types import StructureRules
from hr_payroll.models.base import Base, TimestampMixin


class SalaryStructure(Base, TimestampMixin):
    """Reusable rule set mapping a base salary to payroll fields.

    Rules are stored as JSON objects keyed by field name, with decimals
    serialized as strings.
    """

    __tablename__ = "salary_structure"

    structure_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    applicable_to: Mapped[str] = mapped_column(String(20), nullable=False, default="all")
    applicable_values: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    earnings: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    deductions: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    bonuses: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    overtime: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        CheckConstraint(
            "applicable_to IN ('all', 'department', 'position', 'level')",
            name="salary_structure_applicable_to_check",
        ),
    )

    @property
    def rules(self) -> StructureRules:
        """Parsed calculation rules."""
        return StructureRules.from_dicts(
            earnings=self.earnings,
            deductions=self.deductions,
            bonuses=self.bonuses,
            overtime=self.overtime or None,
        )

    def set_rules(self, rules: StructureRules) -> None:
        """Store rules in their JSON form."""
        self.earnings = {k.value: v.to_dict() for k, v in rules.earnings.items()}
        self.deductions = {k.value: v.to_dict() for k, v in rules.deductions.items()}
        self.bonuses = {k.value: v.to_dict() for k, v in rules.bonuses.items()}
        self.overtime = rules.overtime.to_dict()
