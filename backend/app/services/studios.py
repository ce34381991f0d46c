"""Studio store, including the occupancy claim/release mutations."""

import logging
from typing import Any, Optional, Sequence

from sqlalchemy import select, update, or_, and_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StudioNotFound, StudioAlreadyOccupied, StudioInUse
from app.models.enums import ResidentType
from app.models.studio import Studio

logger = logging.getLogger(__name__)

DESCRIPTIVE_FIELDS = {"name", "view", "floor", "room_grade"}


class StudioStore:
    """Data access for studios.

    Occupancy is only ever written through `claim` and `release`. Claim is a
    conditional update (vacant, or already held by the same resident), so two
    concurrent claims on one studio cannot both succeed.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _execute(self, statement):
        """Run a write; a failed one is rolled back so the session stays usable."""
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    async def create(self, data: dict[str, Any]) -> Studio:
        studio = Studio(
            occupied=False,
            occupied_by=None,
            occupied_by_type=None,
            **{k: v for k, v in data.items() if k in DESCRIPTIVE_FIELDS | {"id"}},
        )
        self.db.add(studio)
        await self._commit()
        await self.db.refresh(studio)
        return studio

    async def get(self, studio_id: str) -> Optional[Studio]:
        result = await self.db.execute(
            select(Studio)
            .where(Studio.id == studio_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(self, available_only: bool = False) -> Sequence[Studio]:
        query = select(Studio)
        if available_only:
            query = query.where(Studio.occupied.is_(False))
        result = await self.db.execute(
            query.order_by(Studio.floor, Studio.id).execution_options(populate_existing=True)
        )
        return result.scalars().all()

    async def update(self, studio_id: str, changes: dict[str, Any]) -> Studio:
        """Update descriptive fields only."""
        studio = await self.get(studio_id)
        if studio is None:
            raise StudioNotFound(studio_id)
        for field, value in changes.items():
            if field in DESCRIPTIVE_FIELDS:
                setattr(studio, field, value)
        await self._commit()
        await self.db.refresh(studio)
        return studio

    async def delete(self, studio_id: str) -> None:
        studio = await self.get(studio_id)
        if studio is None:
            raise StudioNotFound(studio_id)
        if studio.occupied:
            raise StudioInUse(studio_id)
        await self.db.delete(studio)
        await self._commit()

    async def claim(
        self,
        studio_id: str,
        resident_type: ResidentType,
        resident_id: int,
    ) -> Studio:
        """Mark a studio occupied by a resident (Vacant -> Occupied).

        Raises:
            StudioNotFound: no such studio
            StudioAlreadyOccupied: held by a different resident
        """
        result = await self._execute(
            update(Studio)
            .where(
                Studio.id == studio_id,
                or_(
                    Studio.occupied.is_(False),
                    and_(
                        Studio.occupied_by == resident_id,
                        Studio.occupied_by_type == resident_type,
                    ),
                ),
            )
            .values(
                occupied=True,
                occupied_by=resident_id,
                occupied_by_type=resident_type,
            )
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            current = await self.get(studio_id)
            if current is None:
                raise StudioNotFound(studio_id)
            raise StudioAlreadyOccupied(
                studio_id,
                current.occupied_by_type.value if current.occupied_by_type else None,
                current.occupied_by,
            )

        await self._commit()
        logger.info(f"[STUDIO] {studio_id} claimed by {resident_type.value} {resident_id}")
        return await self.get(studio_id)

    async def release(
        self,
        studio_id: str,
        occupant: Optional[tuple[ResidentType, int]] = None,
    ) -> bool:
        """Mark a studio vacant (Occupied -> Vacant).

        With `occupant`, only a studio held by that resident (or by nobody) is
        cleared, so releasing on behalf of one resident never evicts another.
        Returns whether a row was cleared.

        Raises:
            StudioNotFound: no such studio
        """
        conditions = [Studio.id == studio_id]
        if occupant is not None:
            resident_type, resident_id = occupant
            conditions.append(
                or_(
                    Studio.occupied_by.is_(None),
                    and_(
                        Studio.occupied_by == resident_id,
                        Studio.occupied_by_type == resident_type,
                    ),
                )
            )

        result = await self._execute(
            update(Studio)
            .where(*conditions)
            .values(occupied=False, occupied_by=None, occupied_by_type=None)
            .execution_options(synchronize_session=False)
        )

        if result.rowcount == 0:
            current = await self.get(studio_id)
            if current is None:
                raise StudioNotFound(studio_id)
            logger.warning(
                f"[STUDIO] {studio_id} not released: held by "
                f"{current.occupied_by_type.value if current.occupied_by_type else '?'} "
                f"{current.occupied_by}, expected {occupant[0].value} {occupant[1]}"
            )
            return False

        await self._commit()
        logger.info(f"[STUDIO] {studio_id} released")
        return True
