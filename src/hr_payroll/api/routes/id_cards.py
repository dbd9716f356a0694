"""ID card endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from hr_payroll.api.dependencies import AppSettings, DbSession
from hr_payroll.api.schemas import (
    CardStatus,
    CardType,
    ErrorResponse,
    IdCardGenerate,
    IdCardResponse,
    IdCardUpdate,
)
from hr_payroll.reporting import render_card_pdf
from hr_payroll.services.id_card_service import THEMES, IdCardService

router = APIRouter(prefix="/admin/id-cards", tags=["id-cards"])


def _service(db, settings) -> IdCardService:
    return IdCardService(
        db,
        company_name=settings.company_name,
        company_address=settings.company_address,
    )


@router.post(
    "/generate",
    response_model=IdCardResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def generate_card(
    db: DbSession,
    settings: AppSettings,
    payload: IdCardGenerate,
) -> IdCardResponse:
    """Issue an ID card to an employee."""
    card = await _service(db, settings).generate_card(
        payload.employee_id,
        payload.expiry_date,
        design=payload.card_design.model_dump(exclude_none=True),
        card_type=payload.card_type,
        access_level=payload.access_level,
        access_zones=payload.access_zones,
    )
    await db.commit()
    return IdCardResponse.from_card(card)


@router.get("", response_model=list[IdCardResponse])
async def list_cards(
    db: DbSession,
    settings: AppSettings,
    status_filter: Annotated[CardStatus | None, Query(alias="status")] = None,
    card_type: Annotated[CardType | None, Query()] = None,
) -> list[IdCardResponse]:
    """List ID cards with optional filters."""
    cards = await _service(db, settings).list_cards(status=status_filter, card_type=card_type)
    return [IdCardResponse.from_card(c) for c in cards]


@router.get("/themes", response_model=dict[str, dict[str, str]])
async def list_themes() -> dict[str, dict[str, str]]:
    """Card template presets and their colors."""
    return THEMES


@router.get("/expiring", response_model=list[IdCardResponse])
async def expiring_cards(
    db: DbSession,
    settings: AppSettings,
    days: Annotated[int, Query(ge=0)] = 30,
) -> list[IdCardResponse]:
    """Active cards expiring within the given number of days."""
    cards = await _service(db, settings).expiring_cards(days)
    return [IdCardResponse.from_card(c) for c in cards]


@router.put(
    "/card/{card_id}",
    response_model=IdCardResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_card(
    db: DbSession,
    settings: AppSettings,
    card_id: Annotated[UUID, Path()],
    payload: IdCardUpdate,
) -> IdCardResponse:
    card = await _service(db, settings).update_card(
        card_id, payload.model_dump(exclude_none=True)
    )
    await db.commit()
    return IdCardResponse.from_card(card)


@router.delete(
    "/card/{card_id}",
    response_model=IdCardResponse,
    responses={404: {"model": ErrorResponse}},
)
async def revoke_card(
    db: DbSession,
    settings: AppSettings,
    card_id: Annotated[UUID, Path()],
) -> IdCardResponse:
    """Revoke a card. The record is kept with status cancelled."""
    card = await _service(db, settings).revoke_card(card_id)
    await db.commit()
    return IdCardResponse.from_card(card)


@router.get(
    "/card/{card_id}/download",
    responses={
        200: {"content": {"application/pdf": {}}},
        404: {"model": ErrorResponse},
    },
)
async def download_card(
    db: DbSession,
    settings: AppSettings,
    card_id: Annotated[UUID, Path()],
) -> Response:
    """Render the card as PDF."""
    card = await _service(db, settings).get_card(card_id)
    return Response(
        content=render_card_pdf(card),
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="id_card_{card.card_number}.pdf"'
        },
    )


@router.get(
    "/{employee_id}",
    response_model=IdCardResponse,
    responses={404: {"model": ErrorResponse}},
)
async def employee_card(
    db: DbSession,
    settings: AppSettings,
    employee_id: Annotated[UUID, Path()],
) -> IdCardResponse:
    card = await _service(db, settings).get_employee_card(employee_id)
    return IdCardResponse.from_card(card)
