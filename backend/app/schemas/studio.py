"""Studio schemas."""

from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema, TimestampMixin
from app.models.enums import ResidentType, OccupancyIssueKind


class StudioCreate(BaseSchema):
    """Create a new studio. Studios start vacant."""

    id: str = Field(..., min_length=1, max_length=50)
    name: str = Field(..., min_length=1, max_length=255)
    view: Optional[str] = Field(None, max_length=100)
    floor: int = Field(default=1, ge=0)
    room_grade: Optional[str] = Field(None, max_length=100)


class StudioUpdate(BaseSchema):
    """Update descriptive studio fields. Occupancy is changed only through residents."""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    view: Optional[str] = Field(None, max_length=100)
    floor: Optional[int] = Field(None, ge=0)
    room_grade: Optional[str] = Field(None, max_length=100)


class StudioResponse(BaseSchema, TimestampMixin):
    """Studio response."""

    id: str
    name: str
    view: Optional[str] = None
    floor: int
    room_grade: Optional[str] = None
    occupied: bool
    occupied_by: Optional[int] = None
    occupied_by_type: Optional[ResidentType] = None


class StudioReleaseResponse(BaseSchema):
    """Result of an explicit unassignment."""

    studio: StudioResponse
    released: bool
    resident_type: Optional[ResidentType] = None
    resident_id: Optional[int] = None
    resident_warning: Optional[str] = None


class OccupancyIssueResponse(BaseSchema):
    """One divergence between studio occupancy and resident assignment."""

    kind: OccupancyIssueKind
    studio_id: Optional[str] = None
    resident_type: Optional[ResidentType] = None
    resident_id: Optional[int] = None
    detail: str


class OccupancyAuditResponse(BaseSchema):
    """Occupancy consistency report."""

    consistent: bool
    studios_checked: int
    residents_checked: int
    issues: list[OccupancyIssueResponse]
