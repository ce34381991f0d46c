"""Lead and lead-conversion schemas."""

from datetime import date
from typing import Optional

from pydantic import EmailStr, Field

from app.schemas.base import BaseSchema, BulkIds, IDMixin, StayDatesMixin, TimestampMixin
from app.schemas.invoice import InvoiceResponse
from app.schemas.resident import ResidentResponse
from app.models.enums import ResidentType


class LeadCreate(BaseSchema):
    """Create a new lead."""

    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    status: str = Field(default="New", max_length=50)
    source: Optional[str] = Field(None, max_length=100)
    response_category: Optional[str] = Field(None, max_length=100)
    follow_up_stage: Optional[str] = Field(None, max_length=100)
    room_grade: Optional[str] = Field(None, max_length=100)
    duration: Optional[str] = Field(None, max_length=100)
    assigned_to: Optional[str] = Field(None, max_length=50)
    revenue_cents: int = Field(default=0, ge=0)
    notes: Optional[str] = None
    date_of_inquiry: Optional[date] = None


class LeadUpdate(BaseSchema):
    """Update lead."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    status: Optional[str] = Field(None, max_length=50)
    source: Optional[str] = Field(None, max_length=100)
    response_category: Optional[str] = Field(None, max_length=100)
    follow_up_stage: Optional[str] = Field(None, max_length=100)
    room_grade: Optional[str] = Field(None, max_length=100)
    duration: Optional[str] = Field(None, max_length=100)
    assigned_to: Optional[str] = Field(None, max_length=50)
    revenue_cents: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None
    date_of_inquiry: Optional[date] = None


class LeadResponse(BaseSchema, IDMixin, TimestampMixin):
    """Lead response."""

    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    status: str
    source: Optional[str] = None
    response_category: Optional[str] = None
    follow_up_stage: Optional[str] = None
    room_grade: Optional[str] = None
    duration: Optional[str] = None
    assigned_to: Optional[str] = None
    revenue_cents: int
    notes: Optional[str] = None
    date_of_inquiry: Optional[date] = None


class LeadBulkDelete(BulkIds):
    """Delete several leads."""


class LeadBulkDeleteResponse(BaseSchema):
    deleted: int


class LeadConversionRequest(BaseSchema, StayDatesMixin):
    """Operator-entered details for converting a lead into a resident.

    Any field left out falls back to the lead's own value. `stay_type`, when
    given, decides the resident variant without parsing `duration`.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    room_grade: Optional[str] = Field(None, max_length=100)
    duration: Optional[str] = Field(None, max_length=100)
    stay_type: Optional[ResidentType] = None
    studio_id: Optional[str] = Field(None, max_length=50)
    revenue_cents: Optional[int] = Field(None, ge=0)
    payment_plan_id: Optional[int] = None
    installment_count: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None


class LeadConversionResponse(BaseSchema):
    """Conversion outcome: the new resident plus any best-effort step that failed."""

    resident_type: ResidentType
    resident: ResidentResponse
    invoice: Optional[InvoiceResponse] = None
    lead_id: Optional[int] = None
    lead_deleted: bool = False
    studio_claimed: bool = False
    unit_warning: Optional[str] = None
    invoice_warning: Optional[str] = None
    lead_warning: Optional[str] = None
