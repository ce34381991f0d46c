"""Domain exceptions raised by the data stores and the occupancy reconciler."""

from typing import Optional, Union

from fastapi import HTTPException, status


class LodgeFlowError(Exception):
    """Base class for domain errors."""


class NotFoundError(LodgeFlowError):
    """A referenced record does not exist."""

    resource = "Record"

    def __init__(self, record_id: Union[int, str]):
        self.record_id = record_id
        super().__init__(f"{self.resource} {record_id} not found")


class LeadNotFound(NotFoundError):
    resource = "Lead"


class ResidentNotFound(NotFoundError):
    resource = "Resident"


class StudioNotFound(NotFoundError):
    resource = "Studio"


class InvoiceNotFound(NotFoundError):
    resource = "Invoice"


class StudioAlreadyOccupied(LodgeFlowError):
    """A claim targeted a studio held by a different resident."""

    def __init__(
        self,
        studio_id: str,
        occupant_type: Optional[str] = None,
        occupant_id: Optional[int] = None,
    ):
        self.studio_id = studio_id
        self.occupant_type = occupant_type
        self.occupant_id = occupant_id
        holder = f" by {occupant_type} {occupant_id}" if occupant_id is not None else ""
        super().__init__(f"Studio {studio_id} is already occupied{holder}")


class StudioInUse(LodgeFlowError):
    """A studio cannot be deleted while occupied."""

    def __init__(self, studio_id: str):
        self.studio_id = studio_id
        super().__init__(f"Studio {studio_id} is occupied; release it before deleting")


class ConversionFailed(LodgeFlowError):
    """Resident creation failed, so the conversion was aborted with no side effects."""

    def __init__(self, reason: str, lead_id: Optional[int] = None):
        self.reason = reason
        self.lead_id = lead_id
        super().__init__(f"Could not create resident: {reason}")


class ResidentUpdateFailed(LodgeFlowError):
    """The resident record itself could not be updated."""

    def __init__(self, resident_id: int, reason: str):
        self.resident_id = resident_id
        self.reason = reason
        super().__init__(f"Could not update resident {resident_id}: {reason}")


class ResidentDeletionFailed(LodgeFlowError):
    """The resident record could not be deleted (its studio may already be released)."""

    def __init__(self, resident_id: int, reason: str):
        self.resident_id = resident_id
        self.reason = reason
        super().__init__(f"Could not delete resident {resident_id}: {reason}")


def to_http_exception(exc: LodgeFlowError) -> HTTPException:
    """Map a domain error to the HTTP status the API reports it with."""
    if isinstance(exc, NotFoundError):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, (StudioAlreadyOccupied, StudioInUse)):
        code = status.HTTP_409_CONFLICT
    elif isinstance(exc, (ConversionFailed, ResidentUpdateFailed)):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return HTTPException(status_code=code, detail=str(exc))
