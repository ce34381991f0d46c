"""Studios router."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import LodgeFlowError, to_http_exception
from app.routers.deps import get_reconciler
from app.schemas.studio import (
    StudioCreate,
    StudioUpdate,
    StudioResponse,
    StudioReleaseResponse,
    OccupancyIssueResponse,
    OccupancyAuditResponse,
)
from app.services.reconciler import OccupancyReconciler
from app.services.studios import StudioStore

router = APIRouter(prefix="/studios", tags=["studios"])


@router.post("", response_model=StudioResponse, status_code=status.HTTP_201_CREATED)
async def create_studio(
    data: StudioCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create a new (vacant) studio."""
    try:
        return await StudioStore(db).create(data.model_dump())
    except IntegrityError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Studio {data.id} already exists",
        )


@router.get("", response_model=List[StudioResponse])
async def list_studios(
    available: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """List studios, optionally only vacant ones."""
    return await StudioStore(db).list_all(available_only=available)


@router.get("/occupancy/audit", response_model=OccupancyAuditResponse)
async def audit_occupancy(
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Report every divergence between studio occupancy and resident assignment."""
    report = await reconciler.audit_occupancy()
    return OccupancyAuditResponse(
        consistent=report.consistent,
        studios_checked=report.studios_checked,
        residents_checked=report.residents_checked,
        issues=[OccupancyIssueResponse.model_validate(issue) for issue in report.issues],
    )


@router.get("/{studio_id}", response_model=StudioResponse)
async def get_studio(
    studio_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a studio by ID."""
    studio = await StudioStore(db).get(studio_id)
    if not studio:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Studio not found")
    return studio


@router.patch("/{studio_id}", response_model=StudioResponse)
async def update_studio(
    studio_id: str,
    data: StudioUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update descriptive studio fields."""
    try:
        return await StudioStore(db).update(studio_id, data.model_dump(exclude_unset=True))
    except LodgeFlowError as e:
        raise to_http_exception(e)


@router.delete("/{studio_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_studio(
    studio_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Delete a vacant studio."""
    try:
        await StudioStore(db).delete(studio_id)
    except LodgeFlowError as e:
        raise to_http_exception(e)


@router.post("/{studio_id}/release", response_model=StudioReleaseResponse)
async def release_studio(
    studio_id: str,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Vacate a studio and clear its occupant's assignment."""
    try:
        outcome = await reconciler.release_studio(studio_id)
    except LodgeFlowError as e:
        raise to_http_exception(e)

    return StudioReleaseResponse(
        studio=StudioResponse.model_validate(outcome.studio),
        released=outcome.released,
        resident_type=outcome.resident_type,
        resident_id=outcome.resident_id,
        resident_warning=outcome.resident_warning,
    )
