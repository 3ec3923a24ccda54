"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# Largest magnitude a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")

Amount = Annotated[Decimal, Field(ge=-MAX_AMOUNT, le=MAX_AMOUNT)]


# ============================================================================
# Common
# ============================================================================


class ErrorResponse(BaseModel):
    """Error body returned for handled failures."""

    detail: str
    code: str


# ============================================================================
# Payroll run schemas
# ============================================================================


class PayrollRunCreate(BaseModel):
    """Schema for creating a new payroll run."""

    period_start: date
    period_end: date
    organization_id: UUID | None = Field(
        default=None,
        description="Overrides the X-Organization-ID header when given.",
    )


class PayrollRunResponse(BaseModel):
    """Schema for payroll run response."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID | None = None
    user_id: UUID | None = None
    period_start: date
    period_end: date
    status: str
    gross_pay: Decimal
    total_allowances: Decimal
    total_deductions: Decimal
    total_tax: Decimal
    net_pay: Decimal
    created_at: datetime
    updated_at: datetime | None = None


class PayrollRunListResponse(BaseModel):
    """Schema for listing payroll runs."""

    items: list[PayrollRunResponse]
    total: int


# ============================================================================
# Payroll run item schemas
# ============================================================================


class PayrollRunItemCreate(BaseModel):
    """Schema for adding an employee to a run.

    Omit ``tax`` to apply the default flat withholding rate.
    """

    employee_id: str = Field(min_length=1)
    employee_name: str | None = None
    basic_pay: Amount = Decimal("0")
    allowances: Amount = Decimal("0")
    deductions: Amount = Decimal("0")
    tax: Amount | None = None


class PayrollRunItemResponse(BaseModel):
    """Schema for a payroll run item."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    run_id: UUID
    employee_id: str
    employee_name: str | None = None
    basic_pay: Decimal
    allowances: Decimal
    deductions: Decimal
    tax: Decimal
    net_pay: Decimal
    created_at: datetime


class PayrollRunDetailResponse(BaseModel):
    """A run together with its items, oldest item first."""

    run: PayrollRunResponse
    items: list[PayrollRunItemResponse]


RunStatusFilter = Literal["draft", "processing", "completed", "cancelled", "all"]
