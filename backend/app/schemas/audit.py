"""Audit trail schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from app.schemas.base import BaseSchema
from app.models.enums import AuditAction


class AuditEntryResponse(BaseSchema):
    id: UUID
    action: AuditAction
    resource_type: str
    resource_id: str
    details: Optional[dict[str, Any]] = None
    ip_address: Optional[str] = None
    created_at: datetime
