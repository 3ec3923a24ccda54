"""Payroll run service - lifecycle and line item operations."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice_payroll.calculators import compute_item, round_to_cents
from backoffice_payroll.calculators.types import AmountLike
from backoffice_payroll.config import get_settings
from backoffice_payroll.models import PayrollRun, PayrollRunItem
from backoffice_payroll.services.aggregator import PayrollRunNotFoundError, RunAggregator
from backoffice_payroll.services.state_machine import (
    PayrollRunStateMachine,
    PayrollRunStatus,
)

logger = logging.getLogger(__name__)


class PayrollRunItemNotFoundError(Exception):
    """Raised when an item id does not belong to the given run."""

    def __init__(self, run_id: UUID, item_id: UUID):
        self.run_id = run_id
        self.item_id = item_id
        super().__init__(f"Item {item_id} not found on payroll run {run_id}")


class RunClosedError(Exception):
    """Raised when items are added to or removed from a completed/cancelled run."""

    def __init__(self, run_id: UUID, status: str):
        self.run_id = run_id
        self.status = status
        super().__init__(f"Payroll run {run_id} is {status}; its items can no longer change")


class DuplicateEmployeeError(Exception):
    """Raised when an employee already has a line on the run and duplicates are off."""

    def __init__(self, run_id: UUID, employee_id: str):
        self.run_id = run_id
        self.employee_id = employee_id
        super().__init__(f"Employee {employee_id} already has a line on payroll run {run_id}")


class PayrollRunService:
    """Service for managing payroll runs.

    Operations:
    - create_run: New draft run with zeroed totals
    - add_employee: Compute and persist one line, then recompute totals
    - remove_item: Delete one line, then recompute totals
    - recompute_totals: Re-derive run totals from all persisted lines
    - start_processing: draft → processing
    - finalize_run: Recompute, then mark completed
    - cancel_run: Mark cancelled, totals untouched

    Nothing here commits. Callers own the transaction, so an item mutation and
    the recomputation that follows it are committed or rolled back together.
    """

    def __init__(
        self,
        session: AsyncSession,
        tax_rate: Decimal | None = None,
        allow_duplicate_employees: bool | None = None,
    ):
        settings = get_settings()
        self.session = session
        self.aggregator = RunAggregator(session)
        self.tax_rate = settings.default_tax_rate if tax_rate is None else tax_rate
        self.allow_duplicate_employees = (
            settings.allow_duplicate_employees
            if allow_duplicate_employees is None
            else allow_duplicate_employees
        )

    # =========================================================================
    # Reads
    # =========================================================================

    async def get_run(self, run_id: UUID) -> PayrollRun:
        """Load a run or raise PayrollRunNotFoundError."""
        run = await self.session.get(PayrollRun, run_id)
        if run is None:
            raise PayrollRunNotFoundError(run_id)
        return run

    async def list_items(self, run_id: UUID) -> list[PayrollRunItem]:
        """All items of a run, oldest first."""
        result = await self.session.execute(
            select(PayrollRunItem)
            .where(PayrollRunItem.run_id == run_id)
            .order_by(PayrollRunItem.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_run_with_items(self, run_id: UUID) -> tuple[PayrollRun, list[PayrollRunItem]]:
        run = await self.get_run(run_id)
        items = await self.list_items(run_id)
        return run, items

    async def list_runs(
        self,
        organization_id: UUID | None = None,
        status: str | None = None,
    ) -> list[PayrollRun]:
        """List runs newest first, optionally filtered by organization and status.

        A status of ``"all"`` applies no status filter.
        """
        query = select(PayrollRun)
        if organization_id is not None:
            query = query.where(PayrollRun.organization_id == organization_id)
        if status and status != "all":
            query = query.where(PayrollRun.status == PayrollRunStatus(status).value)
        query = query.order_by(PayrollRun.created_at.desc())

        result = await self.session.execute(query)
        return list(result.scalars().all())

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def create_run(
        self,
        period_start: date,
        period_end: date,
        organization_id: UUID | None = None,
        user_id: UUID | None = None,
    ) -> PayrollRun:
        """Create a draft run with all totals at zero.

        The period is stored as given; ordering of start and end is the
        caller's concern.
        """
        run = PayrollRun(
            organization_id=organization_id,
            user_id=user_id,
            period_start=period_start,
            period_end=period_end,
            status=PayrollRunStatus.DRAFT.value,
            gross_pay=Decimal("0"),
            total_allowances=Decimal("0"),
            total_deductions=Decimal("0"),
            total_tax=Decimal("0"),
            net_pay=Decimal("0"),
        )
        self.session.add(run)
        await self.session.flush()

        logger.info(
            "Created payroll run %s for organization %s (%s to %s)",
            run.id,
            organization_id,
            period_start,
            period_end,
        )
        return run

    async def start_processing(self, run_id: UUID) -> PayrollRun:
        run = await self.get_run(run_id)
        return await self._transition(run, PayrollRunStatus.PROCESSING)

    async def finalize_run(self, run_id: UUID) -> PayrollRun:
        """Recompute totals from the final item set, then mark completed.

        Finalizing an already completed run is allowed and only recomputes.
        """
        run = await self.get_run(run_id)
        PayrollRunStateMachine.validate_transition(run.status, PayrollRunStatus.COMPLETED)

        await self.aggregator.recompute_totals(run_id)
        return await self._transition(run, PayrollRunStatus.COMPLETED)

    async def cancel_run(self, run_id: UUID) -> PayrollRun:
        """Mark a run cancelled. Totals are left as they are."""
        run = await self.get_run(run_id)
        if run.status == PayrollRunStatus.CANCELLED:
            return run
        return await self._transition(run, PayrollRunStatus.CANCELLED)

    async def recompute_totals(self, run_id: UUID) -> PayrollRun:
        return await self.aggregator.recompute_totals(run_id)

    # =========================================================================
    # Items
    # =========================================================================

    async def add_employee(
        self,
        run_id: UUID,
        employee_id: str,
        basic_pay: AmountLike,
        allowances: AmountLike = None,
        deductions: AmountLike = None,
        tax: AmountLike = None,
        employee_name: str | None = None,
    ) -> PayrollRunItem:
        """Add one employee line to a run and refresh the run totals.

        Tax defaults to the flat withholding rate unless given explicitly.
        """
        run = await self.get_run(run_id)
        self._ensure_items_mutable(run)

        if not self.allow_duplicate_employees:
            existing = await self.session.scalar(
                select(PayrollRunItem.id).where(
                    PayrollRunItem.run_id == run_id,
                    PayrollRunItem.employee_id == employee_id,
                ).limit(1)
            )
            if existing is not None:
                raise DuplicateEmployeeError(run_id, employee_id)

        # Derive tax and net from the amounts as stored, so every persisted
        # line satisfies net = basic + allowances - deductions - tax.
        basic = round_to_cents(basic_pay)
        allow = round_to_cents(allowances)
        deduct = round_to_cents(deductions)
        amounts = compute_item(
            basic,
            allow,
            deduct,
            tax,
            tax_rate=self.tax_rate,
        )
        item = PayrollRunItem(
            run_id=run_id,
            employee_id=employee_id,
            employee_name=employee_name,
            basic_pay=basic,
            allowances=allow,
            deductions=deduct,
            tax=amounts.tax,
            net_pay=amounts.net_pay,
        )
        self.session.add(item)
        await self.session.flush()

        await self._recompute_after_mutation(run_id)

        logger.info(
            "Added employee %s to payroll run %s (tax=%s net=%s)",
            employee_id,
            run_id,
            amounts.tax,
            amounts.net_pay,
        )
        return item

    async def remove_item(self, run_id: UUID, item_id: UUID) -> PayrollRun:
        """Delete one line from a run and refresh the run totals."""
        run = await self.get_run(run_id)
        self._ensure_items_mutable(run)

        item = await self.session.get(PayrollRunItem, item_id)
        if item is None or item.run_id != run_id:
            raise PayrollRunItemNotFoundError(run_id, item_id)

        await self.session.delete(item)
        await self.session.flush()

        run = await self._recompute_after_mutation(run_id)
        logger.info("Removed item %s from payroll run %s", item_id, run_id)
        return run

    # =========================================================================
    # Internals
    # =========================================================================

    async def _recompute_after_mutation(self, run_id: UUID) -> PayrollRun:
        try:
            return await self.aggregator.recompute_totals(run_id)
        except Exception:
            logger.exception("Recomputing totals failed for payroll run %s", run_id)
            raise

    def _ensure_items_mutable(self, run: PayrollRun) -> None:
        if not PayrollRunStateMachine.can_modify_items(run.status):
            raise RunClosedError(run.id, run.status)

    async def _transition(self, run: PayrollRun, to_status: PayrollRunStatus) -> PayrollRun:
        from_status = run.status
        PayrollRunStateMachine.validate_transition(from_status, to_status)

        run.status = to_status.value
        await self.session.flush()

        logger.info("Payroll run %s: %s -> %s", run.id, from_status, to_status.value)
        return run
