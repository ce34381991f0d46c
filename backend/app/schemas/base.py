"""Shared schema building blocks."""

from datetime import datetime, date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BaseSchema(BaseModel):
    """Base schema: reads ORM rows, strips strings, validates on assignment."""

    model_config = ConfigDict(
        from_attributes=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class TimestampMixin(BaseModel):
    created_at: datetime
    updated_at: Optional[datetime] = None


class IDMixin(BaseModel):
    """Leads, residents, invoices and plans use integer ids (studios use strings)."""

    id: int


class StayDatesMixin(BaseModel):
    """Optional check-in / check-out pair; check-out may not precede check-in."""

    checkin: Optional[date] = None
    checkout: Optional[date] = None

    @model_validator(mode="after")
    def validate_stay_dates(self):
        if self.checkin and self.checkout and self.checkout < self.checkin:
            raise ValueError("checkout must not be before checkin")
        return self


class BulkIds(BaseSchema):
    """Target ids of a bulk operation."""

    ids: list[int] = Field(..., min_length=1)
