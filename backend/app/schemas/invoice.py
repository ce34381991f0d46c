"""Invoice and payment plan schemas."""

from datetime import date
from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin
from app.models.enums import InvoiceStatus


class InvoiceUpdate(BaseSchema):
    """Update invoice status / notes."""

    status: Optional[InvoiceStatus] = None
    due_date: Optional[date] = None
    notes: Optional[str] = None


class InvoiceResponse(BaseSchema, IDMixin, TimestampMixin):
    """Invoice response."""

    invoice_number: str
    student_id: Optional[int] = None
    tourist_id: Optional[int] = None
    payment_plan_id: Optional[int] = None
    amount_cents: int
    currency: str
    status: InvoiceStatus
    issued_date: date
    due_date: date
    description: Optional[str] = None
    notes: Optional[str] = None


class PaymentPlanCreate(BaseSchema):
    """Create a payment plan."""

    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    amount_cents: int = Field(..., ge=0)
    currency: str = Field(default="GBP", min_length=3, max_length=3)
    duration_weeks: int = Field(..., gt=0)
    payment_cycles: int = Field(..., gt=0)
    is_active: bool = True


class PaymentPlanResponse(BaseSchema, IDMixin, TimestampMixin):
    """Payment plan response."""

    name: str
    description: Optional[str] = None
    amount_cents: int
    currency: str
    duration_weeks: int
    payment_cycles: int
    is_active: bool
