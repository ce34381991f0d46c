"""Resident (student / tourist) schemas."""

from datetime import date
from typing import Annotated, Literal, Optional, Union

from pydantic import EmailStr, Field

from app.schemas.base import BaseSchema, BulkIds, IDMixin, StayDatesMixin, TimestampMixin
from app.models.enums import ResidentType, TouristStatus


class ResidentCreate(BaseSchema, StayDatesMixin):
    """Create a resident directly (without a lead).

    Tourists need a check-in date; check-out defaults to check-in.
    """

    name: str = Field(..., min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    room_grade: Optional[str] = Field(None, max_length=100)
    duration: Optional[str] = Field(None, max_length=100)
    revenue_cents: int = Field(default=0, ge=0)
    assigned_to: Optional[str] = Field(None, max_length=50)
    payment_plan_id: Optional[int] = None
    payment_cycles: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None


class ResidentUpdate(BaseSchema):
    """Update a resident. Changing assigned_to reconciles studio occupancy."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=50)
    room_grade: Optional[str] = Field(None, max_length=100)
    checkin: Optional[date] = None
    checkout: Optional[date] = None
    duration: Optional[str] = Field(None, max_length=100)
    revenue_cents: Optional[int] = Field(None, ge=0)
    assigned_to: Optional[str] = Field(None, max_length=50)
    payment_plan_id: Optional[int] = None
    payment_cycles: Optional[int] = Field(None, ge=1)
    status: Optional[TouristStatus] = None
    notes: Optional[str] = None


class ResidentBulkUpdate(BulkIds):
    """Apply the same changes to several residents."""

    changes: ResidentUpdate


class ResidentBulkDelete(BulkIds):
    """Delete several residents."""


class StudentResponse(BaseSchema, IDMixin, TimestampMixin):
    """Long-stay resident response."""

    resident_type: Literal[ResidentType.STUDENT] = ResidentType.STUDENT
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    room_grade: Optional[str] = None
    checkin: date
    duration: Optional[str] = None
    revenue_cents: int
    assigned_to: Optional[str] = None
    payment_plan_id: Optional[int] = None
    wants_installments: bool = False
    installment_plan_name: Optional[str] = None
    payment_cycles: Optional[int] = None
    notes: Optional[str] = None


class TouristResponse(BaseSchema, IDMixin, TimestampMixin):
    """Short-stay guest response."""

    resident_type: Literal[ResidentType.TOURIST] = ResidentType.TOURIST
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    room_grade: Optional[str] = None
    checkin: date
    checkout: date
    duration: Optional[str] = None
    revenue_cents: int
    assigned_to: Optional[str] = None
    status: TouristStatus
    notes: Optional[str] = None


ResidentResponse = Annotated[
    Union[StudentResponse, TouristResponse],
    Field(discriminator="resident_type"),
]

RESIDENT_RESPONSES = {
    ResidentType.STUDENT: StudentResponse,
    ResidentType.TOURIST: TouristResponse,
}


def to_resident_response(resident) -> ResidentResponse:
    """Serialize a Student or Tourist row with the matching schema."""
    return RESIDENT_RESPONSES[resident.resident_type].model_validate(resident)


class ResidentMutationResponse(BaseSchema):
    """Resident plus the outcome of the best-effort studio/invoice steps."""

    resident: ResidentResponse
    claim_warning: Optional[str] = None
    release_warning: Optional[str] = None
    invoice_warning: Optional[str] = None


class ResidentDeleteResponse(BaseSchema):
    """Outcome of a resident deletion."""

    resident_type: ResidentType
    resident_id: int
    released_studio_id: Optional[str] = None
    release_warning: Optional[str] = None


class BulkItemFailure(BaseSchema):
    id: int
    error: str


class BulkResidentResponse(BaseSchema):
    """Collect-and-report result for bulk operations."""

    succeeded: list[int]
    failed: list[BulkItemFailure]
    warnings: dict[int, list[str]] = Field(default_factory=dict)
