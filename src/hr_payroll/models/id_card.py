"""Employee ID card model."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from sqlalchemy import JSON, CheckConstraint, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hr_payroll.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from hr_payroll.models.employee import Employee


class IdCard(Base, TimestampMixin):
    """Identity card issued to an employee (at most one per employee)."""

    __tablename__ = "id_card"

    card_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    employee_id: Mapped[UUID] = mapped_column(
        ForeignKey("employee.employee_id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    card_number: Mapped[str] = mapped_column(String(16), nullable=False, unique=True)
    card_type: Mapped[str] = mapped_column(String(20), nullable=False, default="employee")
    issue_date: Mapped[date] = mapped_column(Date, nullable=False, default=date.today)
    expiry_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    access_level: Mapped[str] = mapped_column(String(20), nullable=False, default="basic")
    access_zones: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    qr_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Theme
    template: Mapped[str] = mapped_column(String(20), nullable=False, default="standard")
    background_color: Mapped[str] = mapped_column(String(9), nullable=False, default="#ffffff")
    text_color: Mapped[str] = mapped_column(String(9), nullable=False, default="#000000")
    accent_color: Mapped[str] = mapped_column(String(9), nullable=False, default="#1976d2")
    border_color: Mapped[str] = mapped_column(String(9), nullable=False, default="#e0e0e0")
    company_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    company_address: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    employee: Mapped[Employee] = relationship(lazy="joined")

    __table_args__ = (
        CheckConstraint(
            "card_type IN ('employee', 'visitor', 'contractor', 'temporary')",
            name="id_card_type_check",
        ),
        CheckConstraint(
            "status IN ('active', 'expired', 'suspended', 'cancelled')",
            name="id_card_status_check",
        ),
        CheckConstraint(
            "access_level IN ('basic', 'standard', 'premium', 'admin')",
            name="id_card_access_level_check",
        ),
    )

    def is_valid(self, today: date | None = None) -> bool:
        """Active and not past its expiry date."""
        today = today or date.today()
        return self.status == "active" and self.expiry_date > today

    def effective_status(self, today: date | None = None) -> str:
        """Stored status, reported as expired once the expiry date has passed."""
        today = today or date.today()
        if self.status == "active" and self.expiry_date <= today:
            return "expired"
        return self.status
