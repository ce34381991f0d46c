"""Shared router dependencies."""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.services.reconciler import OccupancyReconciler


async def get_reconciler(
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> OccupancyReconciler:
    """Reconciler bound to the request's session; audit entries carry the client IP."""
    return OccupancyReconciler.for_session(
        db,
        ip_address=request.client.host if request.client else None,
    )
