"""Pytest fixtures for HR payroll tests."""

from __future__ import annotations

from decimal import Decimal
from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hr_payroll.models import Base, Employee

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def engine():
    """Create a fresh test database engine with the schema applied."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


def make_employee(code: str, first_name: str, **overrides) -> Employee:
    """Build an employee with complete bank details unless overridden."""
    values = {
        "employee_code": code,
        "first_name": first_name,
        "last_name": "Tester",
        "email": f"{first_name.lower()}@example.com",
        "salary": Decimal("50000"),
        "department": "Engineering",
        "position": "Developer",
        "role_level": 3,
        "status": "active",
        "is_active": True,
        "bank_name": "State Bank",
        "ifsc": "SBIN0001234",
        "account_no": "000123456789",
        "account_name": f"{first_name} Tester",
    }
    values.update(overrides)
    return Employee(**values)


@pytest.fixture
async def employees(session: AsyncSession) -> dict[str, Employee]:
    """Seed a small workforce.

    - alice: salaried engineer with bank details
    - bob: salaried sales executive without bank details
    - carol: no salary set
    - dave: inactive
    """
    seeded = {
        "alice": make_employee("EMP001", "Alice"),
        "bob": make_employee(
            "EMP002",
            "Bob",
            salary=Decimal("30000"),
            department="Sales",
            position="Executive",
            role_level=2,
            bank_name=None,
            ifsc=None,
            account_no=None,
            account_name=None,
        ),
        "carol": make_employee("EMP003", "Carol", salary=None),
        "dave": make_employee(
            "EMP004",
            "Dave",
            salary=Decimal("40000"),
            status="inactive",
            is_active=False,
        ),
    }
    session.add_all(seeded.values())
    await session.flush()
    return seeded
