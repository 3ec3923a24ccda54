"""Run-level totals derived from persisted line items."""

from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice_payroll.calculators import RunTotals, sum_items
from backoffice_payroll.models import PayrollRun, PayrollRunItem

logger = logging.getLogger(__name__)


class PayrollRunNotFoundError(Exception):
    """Raised when a payroll run id does not resolve to a run."""

    def __init__(self, run_id: UUID):
        self.run_id = run_id
        super().__init__(f"Payroll run {run_id} not found")


class RunAggregator:
    """Recomputes the five run aggregates from the full item set.

    Totals are always re-derived from every persisted item of the run, never
    adjusted incrementally, so a recomputation also repairs totals left stale
    by an earlier failure. Running it twice with no item change in between
    writes the same values.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def load_totals(self, run_id: UUID) -> RunTotals:
        """Sum the stored amounts of every item currently on the run."""
        result = await self.session.execute(
            select(
                PayrollRunItem.basic_pay,
                PayrollRunItem.allowances,
                PayrollRunItem.deductions,
                PayrollRunItem.tax,
                PayrollRunItem.net_pay,
            ).where(PayrollRunItem.run_id == run_id)
        )
        return sum_items(result.all())

    async def recompute_totals(self, run_id: UUID) -> PayrollRun:
        """Overwrite the run's aggregates with the sums over its items."""
        # Pending item inserts/deletes must be visible to the read below.
        await self.session.flush()

        run = await self.session.get(PayrollRun, run_id)
        if run is None:
            raise PayrollRunNotFoundError(run_id)

        totals = await self.load_totals(run_id)
        for field, value in totals.as_dict().items():
            setattr(run, field, value)
        await self.session.flush()

        logger.debug(
            "Recomputed totals for run %s: gross=%s tax=%s net=%s",
            run_id,
            totals.gross_pay,
            totals.total_tax,
            totals.net_pay,
        )
        return run
