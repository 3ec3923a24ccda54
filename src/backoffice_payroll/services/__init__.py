"""Payroll run services."""

from backoffice_payroll.services.aggregator import PayrollRunNotFoundError, RunAggregator
from backoffice_payroll.services.export_service import (
    export_filename,
    export_run_to_csv,
    format_amount,
)
from backoffice_payroll.services.payroll_run_service import (
    DuplicateEmployeeError,
    PayrollRunItemNotFoundError,
    PayrollRunService,
    RunClosedError,
)
from backoffice_payroll.services.state_machine import (
    InvalidTransitionError,
    PayrollRunStateMachine,
    PayrollRunStatus,
)

__all__ = [
    "DuplicateEmployeeError",
    "InvalidTransitionError",
    "PayrollRunItemNotFoundError",
    "PayrollRunNotFoundError",
    "PayrollRunService",
    "PayrollRunStateMachine",
    "PayrollRunStatus",
    "RunAggregator",
    "RunClosedError",
    "export_filename",
    "export_run_to_csv",
    "format_amount",
]
