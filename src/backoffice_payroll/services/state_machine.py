"""Payroll run state machine with transition validation."""

from __future__ import annotations

from enum import Enum


class PayrollRunStatus(str, Enum):
    """Payroll run status values."""

    DRAFT = "draft"
    PROCESSING = "processing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _status_value(status: str) -> str:
    return getattr(status, "value", status)


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = _status_value(from_status)
        self.to_status = _status_value(to_status)
        self.reason = reason
        msg = f"Invalid transition from '{self.from_status}' to '{self.to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PayrollRunStateMachine:
    """State machine for payroll run status transitions.

    Allowed transitions:
    - draft → processing
    - draft → completed (finalize without an explicit processing step)
    - processing → completed
    - draft → cancelled
    - processing → cancelled
    - completed → completed (re-finalize, recomputes totals again)
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollRunStatus.DRAFT: [
            PayrollRunStatus.PROCESSING,
            PayrollRunStatus.COMPLETED,
            PayrollRunStatus.CANCELLED,
        ],
        PayrollRunStatus.PROCESSING: [
            PayrollRunStatus.COMPLETED,
            PayrollRunStatus.CANCELLED,
        ],
        PayrollRunStatus.COMPLETED: [PayrollRunStatus.COMPLETED],
        PayrollRunStatus.CANCELLED: [],  # Terminal state
    }

    TERMINAL = {
        PayrollRunStatus.COMPLETED,
        PayrollRunStatus.CANCELLED,
    }

    # Statuses where line items can be added or removed
    ITEMS_MUTABLE = {
        PayrollRunStatus.DRAFT,
        PayrollRunStatus.PROCESSING,
    }

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = None
            if from_status in cls.TERMINAL:
                reason = f"run is {_status_value(from_status)}"
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def is_terminal(cls, status: str) -> bool:
        return status in cls.TERMINAL

    @classmethod
    def can_modify_items(cls, status: str) -> bool:
        """Check if line items can be added to or removed from the run."""
        return status in cls.ITEMS_MUTABLE

    @classmethod
    def get_next_statuses(cls, current_status: str) -> list[str]:
        """Get list of valid next statuses from current status."""
        return cls.VALID_TRANSITIONS.get(current_status, [])
