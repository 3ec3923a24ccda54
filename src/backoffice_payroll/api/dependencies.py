"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice_payroll.database import init_db
from backoffice_payroll.services import PayrollRunService


@dataclass(frozen=True)
class RequestContext:
    """Organization and user the request acts for.

    Authentication lives in front of this service; it forwards the resolved
    ids as headers.
    """

    organization_id: UUID | None = None
    user_id: UUID | None = None


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency.

    Write endpoints commit explicitly; anything left uncommitted when the
    handler raises is rolled back.
    """
    _, factory = init_db()
    async with factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


def _parse_uuid_header(name: str, value: str | None) -> UUID | None:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {name} format",
        )


async def get_request_context(
    x_organization_id: Annotated[str | None, Header()] = None,
    x_user_id: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract organization and user ids from headers."""
    return RequestContext(
        organization_id=_parse_uuid_header("X-Organization-ID", x_organization_id),
        user_id=_parse_uuid_header("X-User-ID", x_user_id),
    )


# Type aliases for cleaner dependency injection
DbSession = Annotated[AsyncSession, Depends(get_db_session)]
Context = Annotated[RequestContext, Depends(get_request_context)]


async def get_payroll_run_service(db: DbSession) -> PayrollRunService:
    return PayrollRunService(db)


RunService = Annotated[PayrollRunService, Depends(get_payroll_run_service)]
