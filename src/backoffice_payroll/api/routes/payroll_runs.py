"""Payroll run API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, Response, status

from backoffice_payroll.api.dependencies import Context, DbSession, RunService
from backoffice_payroll.api.schemas import (
    ErrorResponse,
    PayrollRunCreate,
    PayrollRunDetailResponse,
    PayrollRunItemCreate,
    PayrollRunItemResponse,
    PayrollRunListResponse,
    PayrollRunResponse,
    RunStatusFilter,
)
from backoffice_payroll.services import export_filename, export_run_to_csv

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])

RunId = Annotated[UUID, Path()]


# ============================================================================
# Payroll Run CRUD
# ============================================================================


@router.post(
    "",
    response_model=PayrollRunResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_payroll_run(
    db: DbSession,
    service: RunService,
    context: Context,
    payload: PayrollRunCreate,
) -> PayrollRunResponse:
    """Create a new payroll run in draft status."""
    run = await service.create_run(
        period_start=payload.period_start,
        period_end=payload.period_end,
        organization_id=payload.organization_id or context.organization_id,
        user_id=context.user_id,
    )
    await db.commit()
    return PayrollRunResponse.model_validate(run)


@router.get("", response_model=PayrollRunListResponse)
async def list_payroll_runs(
    service: RunService,
    context: Context,
    status_filter: Annotated[RunStatusFilter, Query(alias="status")] = "all",
) -> PayrollRunListResponse:
    """List payroll runs for the caller's organization, newest first."""
    runs = await service.list_runs(
        organization_id=context.organization_id,
        status=status_filter,
    )
    return PayrollRunListResponse(
        items=[PayrollRunResponse.model_validate(run) for run in runs],
        total=len(runs),
    )


@router.get(
    "/{run_id}",
    response_model=PayrollRunDetailResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_payroll_run(service: RunService, run_id: RunId) -> PayrollRunDetailResponse:
    """Get a payroll run with its items."""
    run, items = await service.get_run_with_items(run_id)
    return PayrollRunDetailResponse(
        run=PayrollRunResponse.model_validate(run),
        items=[PayrollRunItemResponse.model_validate(item) for item in items],
    )


# ============================================================================
# Items
# ============================================================================


@router.post(
    "/{run_id}/items",
    response_model=PayrollRunItemResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
    },
)
async def add_payroll_run_item(
    db: DbSession,
    service: RunService,
    run_id: RunId,
    payload: PayrollRunItemCreate,
) -> PayrollRunItemResponse:
    """Add an employee to a run. Run totals are recomputed before returning."""
    item = await service.add_employee(
        run_id,
        employee_id=payload.employee_id,
        employee_name=payload.employee_name,
        basic_pay=payload.basic_pay,
        allowances=payload.allowances,
        deductions=payload.deductions,
        tax=payload.tax,
    )
    await db.commit()
    return PayrollRunItemResponse.model_validate(item)


@router.delete(
    "/{run_id}/items/{item_id}",
    response_model=PayrollRunResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def remove_payroll_run_item(
    db: DbSession,
    service: RunService,
    run_id: RunId,
    item_id: Annotated[UUID, Path()],
) -> PayrollRunResponse:
    """Remove an item from a run and return the recomputed run."""
    run = await service.remove_item(run_id, item_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


# ============================================================================
# Payroll Run State Transitions
# ============================================================================


@router.post(
    "/{run_id}/recompute",
    response_model=PayrollRunResponse,
    responses={404: {"model": ErrorResponse}},
)
async def recompute_payroll_run(db: DbSession, service: RunService, run_id: RunId) -> PayrollRunResponse:
    """Re-derive run totals from the persisted items. Idempotent."""
    run = await service.recompute_totals(run_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{run_id}/process",
    response_model=PayrollRunResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def process_payroll_run(db: DbSession, service: RunService, run_id: RunId) -> PayrollRunResponse:
    """Move a draft run to processing."""
    run = await service.start_processing(run_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{run_id}/finalize",
    response_model=PayrollRunResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def finalize_payroll_run(db: DbSession, service: RunService, run_id: RunId) -> PayrollRunResponse:
    """Recompute totals and mark the run completed."""
    run = await service.finalize_run(run_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


@router.post(
    "/{run_id}/cancel",
    response_model=PayrollRunResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def cancel_payroll_run(db: DbSession, service: RunService, run_id: RunId) -> PayrollRunResponse:
    """Cancel a run. Totals are left untouched."""
    run = await service.cancel_run(run_id)
    await db.commit()
    return PayrollRunResponse.model_validate(run)


# ============================================================================
# Export
# ============================================================================


@router.get(
    "/{run_id}/export",
    response_class=Response,
    responses={
        200: {"content": {"text/csv": {}}},
        404: {"model": ErrorResponse},
    },
)
async def export_payroll_run(service: RunService, run_id: RunId) -> Response:
    """Download the run as CSV."""
    run, items = await service.get_run_with_items(run_id)
    return Response(
        content=export_run_to_csv(run, items),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(run)}"'},
    )
