"""ORM models."""

from backoffice_payroll.models.base import Base, TimestampMixin
from backoffice_payroll.models.payroll import PayrollRun, PayrollRunItem

__all__ = [
    "Base",
    "TimestampMixin",
    "PayrollRun",
    "PayrollRunItem",
]
