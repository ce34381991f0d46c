"""Residents router (students and tourists).

Every mutation goes through the occupancy reconciler so studio occupancy
follows resident assignment.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import LodgeFlowError, to_http_exception
from app.models.enums import ResidentType
from app.routers.deps import get_reconciler
from app.schemas.audit import AuditEntryResponse
from app.schemas.resident import (
    ResidentCreate,
    ResidentUpdate,
    ResidentBulkUpdate,
    ResidentBulkDelete,
    ResidentResponse,
    ResidentMutationResponse,
    ResidentDeleteResponse,
    BulkResidentResponse,
    to_resident_response,
)
from app.services.audit import AuditService
from app.services.invoices import PaymentPlanStore
from app.services.reconciler import OccupancyReconciler
from app.services.residents import ResidentStore

router = APIRouter(prefix="/residents", tags=["residents"])


@router.get("/{resident_type}", response_model=List[ResidentResponse])
async def list_residents(
    resident_type: ResidentType,
    db: AsyncSession = Depends(get_db),
):
    """List students or tourists."""
    residents = await ResidentStore(db).list_all(resident_type)
    return [to_resident_response(r) for r in residents]


@router.post(
    "/{resident_type}",
    response_model=ResidentMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_resident(
    resident_type: ResidentType,
    data: ResidentCreate,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
    db: AsyncSession = Depends(get_db),
):
    """Create a resident, claim its studio and issue its first invoice."""
    plans = []
    if data.payment_plan_id is not None:
        plans = await PaymentPlanStore(db).list_all(active_only=False)

    try:
        outcome = await reconciler.create_resident(resident_type, data.model_dump(), payment_plans=plans)
    except LodgeFlowError as e:
        raise to_http_exception(e)

    return ResidentMutationResponse(
        resident=to_resident_response(outcome.resident),
        claim_warning=outcome.unit_warning,
        invoice_warning=outcome.invoice_warning,
    )


@router.post("/{resident_type}/bulk-delete", response_model=BulkResidentResponse)
async def bulk_delete_residents(
    resident_type: ResidentType,
    data: ResidentBulkDelete,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Delete several residents. Failures are reported per id, never fail-fast."""
    outcome = await reconciler.bulk_delete_residents(resident_type, data.ids)
    return BulkResidentResponse(**outcome.to_dict())


@router.post("/{resident_type}/bulk-update", response_model=BulkResidentResponse)
async def bulk_update_residents(
    resident_type: ResidentType,
    data: ResidentBulkUpdate,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Apply the same changes to several residents."""
    outcome = await reconciler.bulk_update_residents(
        resident_type,
        data.ids,
        data.changes.model_dump(exclude_unset=True),
    )
    return BulkResidentResponse(**outcome.to_dict())


@router.get("/{resident_type}/{resident_id}", response_model=ResidentResponse)
async def get_resident(
    resident_type: ResidentType,
    resident_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a resident by ID."""
    resident = await ResidentStore(db).get(resident_type, resident_id)
    if not resident:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resident not found")
    return to_resident_response(resident)


@router.patch("/{resident_type}/{resident_id}", response_model=ResidentMutationResponse)
async def update_resident(
    resident_type: ResidentType,
    resident_id: int,
    data: ResidentUpdate,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Update a resident. A new `assigned_to` releases the old studio and claims the new one."""
    try:
        outcome = await reconciler.update_resident(
            resident_type,
            resident_id,
            data.model_dump(exclude_unset=True),
        )
    except LodgeFlowError as e:
        raise to_http_exception(e)

    return ResidentMutationResponse(
        resident=to_resident_response(outcome.resident),
        claim_warning=outcome.claim_warning,
        release_warning=outcome.release_warning,
    )


@router.delete("/{resident_type}/{resident_id}", response_model=ResidentDeleteResponse)
async def delete_resident(
    resident_type: ResidentType,
    resident_id: int,
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Release the resident's studio, then delete the resident."""
    try:
        outcome = await reconciler.delete_resident(resident_type, resident_id)
    except LodgeFlowError as e:
        raise to_http_exception(e)

    return ResidentDeleteResponse(
        resident_type=outcome.resident_type,
        resident_id=outcome.resident_id,
        released_studio_id=outcome.released_studio_id,
        release_warning=outcome.release_warning,
    )


@router.get("/{resident_type}/{resident_id}/history", response_model=List[AuditEntryResponse])
async def resident_history(
    resident_type: ResidentType,
    resident_id: int,
    limit: int = Query(50, ge=1, le=500),
    db: AsyncSession = Depends(get_db),
):
    """Audit trail of a resident, newest first. Kept after the resident is deleted."""
    return await AuditService(db).history(resident_type.value, resident_id, limit=limit)
