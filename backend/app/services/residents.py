"""Resident store: CRUD over the students and tourists tables."""

import logging
from typing import Any, Optional, Sequence, Union

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ResidentNotFound
from app.models.enums import ResidentType
from app.models.resident import RESIDENT_MODELS, Student, Tourist

logger = logging.getLogger(__name__)

Resident = Union[Student, Tourist]


def resident_columns(variant: ResidentType) -> set[str]:
    """Writable column names of a resident variant."""
    return set(RESIDENT_MODELS[variant].__table__.columns.keys()) - {"id", "created_at", "updated_at"}


class ResidentStore:
    """Data access for both resident variants.

    Every mutating call commits on success and rolls the session back on a
    database error before re-raising.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, variant: ResidentType, payload: dict[str, Any]) -> Optional[Resident]:
        """Insert a resident of the given variant. Unknown keys are ignored."""
        model = RESIDENT_MODELS[variant]
        allowed = resident_columns(variant)
        resident = model(**{k: v for k, v in payload.items() if k in allowed})
        self.db.add(resident)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(resident)
        return resident

    async def get(self, variant: ResidentType, resident_id: int) -> Optional[Resident]:
        model = RESIDENT_MODELS[variant]
        result = await self.db.execute(
            select(model)
            .where(model.id == resident_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self, variant: ResidentType) -> Sequence[Resident]:
        model = RESIDENT_MODELS[variant]
        result = await self.db.execute(select(model).order_by(model.id))
        return result.scalars().all()

    async def list_by_studio(self, studio_id: str) -> list[Resident]:
        """All residents of either variant assigned to a studio."""
        residents: list[Resident] = []
        for model in RESIDENT_MODELS.values():
            result = await self.db.execute(
                select(model).where(model.assigned_to == studio_id).order_by(model.id)
            )
            residents.extend(result.scalars().all())
        return residents

    async def update(
        self,
        variant: ResidentType,
        resident_id: int,
        changes: dict[str, Any],
    ) -> Resident:
        """Apply changes to a resident. Keys the variant does not have are skipped."""
        resident = await self.get(variant, resident_id)
        if resident is None:
            raise ResidentNotFound(resident_id)

        allowed = resident_columns(variant)
        for field, value in changes.items():
            if field in allowed:
                setattr(resident, field, value)

        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(resident)
        return resident

    async def delete(self, variant: ResidentType, resident_id: int) -> None:
        resident = await self.get(variant, resident_id)
        if resident is None:
            raise ResidentNotFound(resident_id)
        await self.db.delete(resident)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        logger.info(f"[RESIDENT] Deleted {variant.value} {resident_id}")
