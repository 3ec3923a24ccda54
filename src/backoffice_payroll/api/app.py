"""FastAPI application factory."""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backoffice_payroll.api.routes import health_router, payroll_runs_router
from backoffice_payroll.config import configure_logging
from backoffice_payroll.database import create_schema, dispose_db
from backoffice_payroll.services import (
    DuplicateEmployeeError,
    InvalidTransitionError,
    PayrollRunItemNotFoundError,
    PayrollRunNotFoundError,
    RunClosedError,
)

logger = logging.getLogger(__name__)

# Domain exception -> (HTTP status, error code)
ERROR_STATUS: dict[type[Exception], tuple[int, str]] = {
    PayrollRunNotFoundError: (status.HTTP_404_NOT_FOUND, "RUN_NOT_FOUND"),
    PayrollRunItemNotFoundError: (status.HTTP_404_NOT_FOUND, "ITEM_NOT_FOUND"),
    InvalidTransitionError: (status.HTTP_400_BAD_REQUEST, "INVALID_TRANSITION"),
    RunClosedError: (status.HTTP_400_BAD_REQUEST, "RUN_CLOSED"),
    DuplicateEmployeeError: (status.HTTP_409_CONFLICT, "DUPLICATE_EMPLOYEE"),
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    configure_logging()
    await create_schema()
    yield
    # Shutdown
    await dispose_db()


def create_app(use_lifespan: bool = True) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Back-office Payroll API",
        description="Payroll runs, line items and run totals",
        version="0.1.0",
        lifespan=lifespan if use_lifespan else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    def _register(exc_type: type[Exception], http_status: int, code: str) -> None:
        async def handler(request: Request, exc: Exception) -> JSONResponse:
            return JSONResponse(
                status_code=http_status,
                content={"detail": str(exc), "code": code},
            )

        app.add_exception_handler(exc_type, handler)

    for exc_type, (http_status, code) in ERROR_STATUS.items():
        _register(exc_type, http_status, code)

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(payroll_runs_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
