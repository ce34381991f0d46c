"""Lead store."""

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import select, delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import LeadNotFound
from app.models.lead import Lead

logger = logging.getLogger(__name__)


class LeadStore:
    """Data access for leads."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def create(self, data: dict[str, Any]) -> Lead:
        lead = Lead(**data)
        self.db.add(lead)
        await self._commit()
        await self.db.refresh(lead)
        return lead

    async def get(self, lead_id: int) -> Optional[Lead]:
        result = await self.db.execute(select(Lead).where(Lead.id == lead_id))
        return result.scalar_one_or_none()

    async def list_all(
        self,
        status: Optional[str] = None,
        source: Optional[str] = None,
    ) -> Sequence[Lead]:
        query = select(Lead)
        if status:
            query = query.where(Lead.status == status)
        if source:
            query = query.where(Lead.source == source)
        result = await self.db.execute(query.order_by(Lead.created_at.desc(), Lead.id.desc()))
        return result.scalars().all()

    async def update(self, lead_id: int, changes: dict[str, Any]) -> Lead:
        lead = await self.get(lead_id)
        if lead is None:
            raise LeadNotFound(lead_id)
        for field, value in changes.items():
            setattr(lead, field, value)
        await self._commit()
        await self.db.refresh(lead)
        return lead

    async def delete(self, lead_id: int) -> None:
        lead = await self.get(lead_id)
        if lead is None:
            raise LeadNotFound(lead_id)
        await self.db.delete(lead)
        await self._commit()
        logger.info(f"[LEAD] Deleted lead {lead_id}")

    async def bulk_delete(self, lead_ids: list[int]) -> int:
        result = await self.db.execute(delete(Lead).where(Lead.id.in_(lead_ids)))
        await self._commit()
        return result.rowcount
