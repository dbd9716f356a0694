"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from hr_payroll.config import Settings, get_settings
from hr_payroll.database import init_db
from hr_payroll.payments import BankTransferProvider, MockBankProvider


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Handlers commit their own writes. Anything uncommitted is rolled back
    when the handler raises.
    """
    _, session_factory = init_db()
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_employee_id(
    x_employee_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Extract the calling employee's ID from header."""
    if not x_employee_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Employee-ID header is required",
        )
    try:
        return UUID(x_employee_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Employee-ID format",
        )


def get_payment_provider(
    settings: Annotated[Settings, Depends(get_settings)],
) -> BankTransferProvider:
    """Payout provider used by disbursement."""
    return MockBankProvider(default_currency=settings.payment_currency)


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
EmployeeId = Annotated[UUID, Depends(get_employee_id)]
AppSettings = Annotated[Settings, Depends(get_settings)]
PaymentProvider = Annotated[BankTransferProvider, Depends(get_payment_provider)]
