"""Employee ID card service."""

from __future__ import annotations

import json
import logging
import random
from datetime import date, timedelta
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.errors import DuplicateError, InvalidInputError, NotFoundError
from hr_payroll.models import Employee, IdCard

logger = logging.getLogger(__name__)

# Theme presets offered by the card designer
THEMES: dict[str, dict[str, str]] = {
    "standard": {
        "background_color": "#ffffff",
        "text_color": "#000000",
        "accent_color": "#1976d2",
        "border_color": "#e0e0e0",
    },
    "corporate": {
        "background_color": "#f8f9fa",
        "text_color": "#212529",
        "accent_color": "#0d6efd",
        "border_color": "#dee2e6",
    },
    "executive": {
        "background_color": "#1a1a1a",
        "text_color": "#ffffff",
        "accent_color": "#ffd700",
        "border_color": "#333333",
    },
    "modern": {
        "background_color": "#ffffff",
        "text_color": "#2c3e50",
        "accent_color": "#e74c3c",
        "border_color": "#bdc3c7",
    },
    "professional": {
        "background_color": "#ffffff",
        "text_color": "#34495e",
        "accent_color": "#3498db",
        "border_color": "#95a5a6",
    },
}

DESIGN_FIELDS = (
    "template",
    "background_color",
    "text_color",
    "accent_color",
    "border_color",
    "company_name",
    "company_address",
)
UPDATABLE_FIELDS = DESIGN_FIELDS + (
    "expiry_date",
    "status",
    "card_type",
    "access_level",
    "access_zones",
)
CARD_NUMBER_ATTEMPTS = 10


def resolve_design(
    design: Mapping[str, Any] | None,
    company_name: str,
    company_address: str = "",
) -> dict[str, str]:
    """Theme preset colors overlaid with explicit design values."""
    design = {k: v for k, v in (design or {}).items() if v is not None}
    template = design.get("template", "standard")
    if template not in THEMES:
        raise InvalidInputError(f"Unknown card template: {template}")
    resolved = {
        "template": template,
        **THEMES[template],
        "company_name": company_name,
        "company_address": company_address,
    }
    resolved.update({k: design[k] for k in DESIGN_FIELDS if k in design})
    return resolved


def qr_payload(employee: Employee) -> str:
    """JSON text identifying the card holder."""
    return json.dumps(
        {
            "employee_code": employee.employee_code,
            "email": employee.email,
            "name": employee.full_name,
            "department": employee.department,
            "job_title": employee.position,
        }
    )


class IdCardService:
    """Issues and maintains employee ID cards."""

    def __init__(
        self,
        session: AsyncSession,
        company_name: str = "",
        company_address: str = "",
    ):
        self.session = session
        self.company_name = company_name
        self.company_address = company_address

    async def get_card(self, card_id: UUID) -> IdCard:
        card = await self.session.get(IdCard, card_id)
        if card is None:
            raise NotFoundError("ID card", card_id)
        return card

    async def generate_card(
        self,
        employee_id: UUID,
        expiry_date: date,
        design: Mapping[str, Any] | None = None,
        card_type: str = "employee",
        access_level: str = "basic",
        access_zones: list[str] | None = None,
        today: date | None = None,
    ) -> IdCard:
        """Issue a card to an employee.

        Raises:
            NotFoundError: If the employee does not exist.
            DuplicateError: If the employee already has a card.
            InvalidInputError: If the expiry date is not in the future.
        """
        today = today or date.today()
        employee = await self.session.get(Employee, employee_id)
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        if await self._find_by_employee(employee_id) is not None:
            raise DuplicateError(
                "ID card already exists for this employee. Please update it instead."
            )
        if expiry_date <= today:
            raise InvalidInputError("Expiry date must be in the future")

        card = IdCard(
            employee=employee,
            card_number=await self._new_card_number(today),
            card_type=card_type,
            issue_date=today,
            expiry_date=expiry_date,
            status="active",
            access_level=access_level,
            access_zones=list(access_zones or []),
            qr_data=qr_payload(employee),
            **resolve_design(design, self.company_name, self.company_address),
        )
        self.session.add(card)
        await self.session.flush()
        logger.info("Issued ID card %s to %s", card.card_number, employee.employee_code)
        return card

    async def list_cards(
        self,
        status: str | None = None,
        card_type: str | None = None,
    ) -> list[IdCard]:
        query = select(IdCard).order_by(IdCard.card_number)
        if status is not None:
            query = query.where(IdCard.status == status)
        if card_type is not None:
            query = query.where(IdCard.card_type == card_type)
        return list((await self.session.execute(query)).scalars().all())

    async def get_employee_card(self, employee_id: UUID) -> IdCard:
        card = await self._find_by_employee(employee_id)
        if card is None:
            raise NotFoundError("ID card for employee", employee_id)
        return card

    async def update_card(self, card_id: UUID, updates: Mapping[str, Any]) -> IdCard:
        """Apply a partial update. A template change resets the theme colors."""
        card = await self.get_card(card_id)
        values = {k: v for k, v in updates.items() if k in UPDATABLE_FIELDS and v is not None}

        template = values.get("template")
        if template is not None:
            if template not in THEMES:
                raise InvalidInputError(f"Unknown card template: {template}")
            for name, color in THEMES[template].items():
                values.setdefault(name, color)

        for name, value in values.items():
            setattr(card, name, value)
        await self.session.flush()
        return card

    async def revoke_card(self, card_id: UUID) -> IdCard:
        card = await self.get_card(card_id)
        card.status = "cancelled"
        await self.session.flush()
        logger.info("Revoked ID card %s", card.card_number)
        return card

    async def expiring_cards(self, days: int = 30, today: date | None = None) -> list[IdCard]:
        """Active cards whose expiry falls within the next ``days`` days."""
        today = today or date.today()
        result = await self.session.execute(
            select(IdCard)
            .where(
                IdCard.status == "active",
                IdCard.expiry_date > today,
                IdCard.expiry_date <= today + timedelta(days=days),
            )
            .order_by(IdCard.expiry_date)
        )
        return list(result.scalars().all())

    async def _find_by_employee(self, employee_id: UUID) -> IdCard | None:
        result = await self.session.execute(
            select(IdCard).where(IdCard.employee_id == employee_id)
        )
        return result.scalar_one_or_none()

    async def _new_card_number(self, today: date) -> str:
        prefix = f"ID{today.year % 100:02d}"
        for _ in range(CARD_NUMBER_ATTEMPTS):
            number = f"{prefix}{random.randint(100000, 999999)}"
            taken = await self.session.execute(
                select(IdCard.card_id).where(IdCard.card_number == number)
            )
            if taken.first() is None:
                return number
        raise DuplicateError("Could not allocate a unique card number")
