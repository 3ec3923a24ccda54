"""CSV export of a payroll run."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from backoffice_payroll.calculators import round_to_cents
from backoffice_payroll.models import PayrollRun, PayrollRunItem

EXPORT_HEADER = [
    "Employee ID",
    "Employee Name",
    "Basic Pay",
    "Allowances",
    "Deductions",
    "Tax",
    "Net Pay",
]


def format_amount(value: object) -> str:
    """Two-decimal text for an amount; None renders as 0.00."""
    return str(round_to_cents(value))


def export_filename(run: PayrollRun) -> str:
    return f"payroll_run_{run.id}.csv"


def export_run_to_csv(run: PayrollRun, items: Iterable[PayrollRunItem]) -> str:
    """Render a run and its items as CSV text.

    One row per item in the order given, then a totals row built from the
    run's persisted aggregates (not re-summed from ``items``). Rows are
    separated by ``\\n`` with no trailing newline. Pure: no I/O.
    """
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")

    # Header
    writer.writerow(EXPORT_HEADER)

    # Lines
    for item in items:
        writer.writerow([
            item.employee_id,
            item.employee_name or "",
            format_amount(item.basic_pay),
            format_amount(item.allowances),
            format_amount(item.deductions),
            format_amount(item.tax),
            format_amount(item.net_pay),
        ])

    # Totals
    writer.writerow([
        "",
        "Totals",
        format_amount(run.gross_pay),
        format_amount(run.total_allowances),
        format_amount(run.total_deductions),
        format_amount(run.total_tax),
        format_amount(run.net_pay),
    ])

    return output.getvalue().rstrip("\n")
