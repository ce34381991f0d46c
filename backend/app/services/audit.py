"""Audit trail writer and reader."""

import logging
from typing import Any, Optional, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.audit import AuditLog
from app.models.enums import AuditAction

logger = logging.getLogger(__name__)


class AuditService:
    """Records occupancy transitions for one request.

    The client address is bound once at construction so callers only pass
    what happened and to which resource.
    """

    def __init__(self, db: AsyncSession, ip_address: Optional[str] = None):
        self.db = db
        self.ip_address = ip_address

    async def log(
        self,
        action: AuditAction,
        resource_type: str,
        resource_id: Union[int, str],
        details: Optional[dict[str, Any]] = None,
    ) -> AuditLog:
        """Append an entry and commit it as its own unit of work."""
        entry = AuditLog(
            action=action,
            resource_type=resource_type,
            resource_id=str(resource_id),
            details=details or {},
            ip_address=self.ip_address,
        )
        self.db.add(entry)
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error(f"[AUDIT] Could not write {action.value} for {resource_type} {resource_id}: {e}")
            raise
        return entry

    async def history(
        self,
        resource_type: str,
        resource_id: Union[int, str],
        limit: int = 50,
    ) -> list[AuditLog]:
        """Entries for one resource, newest first."""
        result = await self.db.execute(
            select(AuditLog)
            .where(
                AuditLog.resource_type == resource_type,
                AuditLog.resource_id == str(resource_id),
            )
            .order_by(AuditLog.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())
