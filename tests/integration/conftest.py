"""Integration test fixtures: the real app over an in-memory database."""

from collections.abc import AsyncGenerator
from decimal import Decimal
from uuid import UUID

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from hr_payroll.api.app import create_app
from hr_payroll.api.dependencies import get_db_session
from hr_payroll.models import Employee

# Fixed IDs for seeded employees
ALICE_EMPLOYEE_ID = UUID("e5a4c9d3-4567-89ab-cdef-012345678901")
BOB_EMPLOYEE_ID = UUID("f6b5dae4-5678-9abc-def0-123456789012")
CAROL_EMPLOYEE_ID = UUID("a1b2c3d4-1111-2222-3333-444455556666")


@pytest_asyncio.fixture
async def seeded_db(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    """Commit a small workforce: alice is payable, bob lacks bank details, carol has no salary."""
    async with session_factory() as session:
        session.add_all(
            [
                Employee(
                    employee_id=ALICE_EMPLOYEE_ID,
                    employee_code="EMP001",
                    first_name="Alice",
                    last_name="Tester",
                    email="alice@example.com",
                    salary=Decimal("50000"),
                    department="Engineering",
                    position="Developer",
                    role_level=3,
                    bank_name="State Bank",
                    ifsc="SBIN0001234",
                    account_no="000123456789",
                    account_name="Alice Tester",
                ),
                Employee(
                    employee_id=BOB_EMPLOYEE_ID,
                    employee_code="EMP002",
                    first_name="Bob",
                    last_name="Tester",
                    email="bob@example.com",
                    salary=Decimal("30000"),
                    department="Sales",
                    position="Executive",
                    role_level=2,
                ),
                Employee(
                    employee_id=CAROL_EMPLOYEE_ID,
                    employee_code="EMP003",
                    first_name="Carol",
                    last_name="Tester",
                    email="carol@example.com",
                    department="Engineering",
                    position="Intern",
                    role_level=1,
                ),
            ]
        )
        await session.commit()
    yield session_factory


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client bound to the test database."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
