"""Pytest fixtures for payroll run tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from datetime import date
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from backoffice_payroll.api.app import create_app
from backoffice_payroll.api.dependencies import get_db_session
from backoffice_payroll.database import make_session_factory
from backoffice_payroll.models import Base, PayrollRun
from backoffice_payroll.services import PayrollRunService

# In-memory SQLite shared across connections of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh test database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session(engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    session_factory = make_session_factory(engine)

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def service(session: AsyncSession) -> PayrollRunService:
    """Service with the default policy pinned, independent of the environment."""
    return PayrollRunService(
        session,
        tax_rate=Decimal("0.16"),
        allow_duplicate_employees=True,
    )


@pytest_asyncio.fixture
async def draft_run(service: PayrollRunService) -> PayrollRun:
    """A draft run for January 2024."""
    return await service.create_run(
        period_start=date(2024, 1, 1),
        period_end=date(2024, 1, 31),
    )


@pytest_asyncio.fixture
async def client(engine: AsyncEngine) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client against the app, wired to the test database."""
    app = create_app(use_lifespan=False)
    session_factory = make_session_factory(engine)

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
