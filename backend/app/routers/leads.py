"""Leads router, including lead -> resident conversion."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import LodgeFlowError, to_http_exception
from app.routers.deps import get_reconciler
from app.schemas.invoice import InvoiceResponse
from app.schemas.lead import (
    LeadCreate,
    LeadUpdate,
    LeadResponse,
    LeadBulkDelete,
    LeadBulkDeleteResponse,
    LeadConversionRequest,
    LeadConversionResponse,
)
from app.schemas.resident import to_resident_response
from app.services.invoices import PaymentPlanStore
from app.services.leads import LeadStore
from app.services.reconciler import OccupancyReconciler, ConversionOutcome

router = APIRouter(prefix="/leads", tags=["leads"])


def conversion_response(outcome: ConversionOutcome) -> LeadConversionResponse:
    return LeadConversionResponse(
        resident_type=outcome.resident_type,
        resident=to_resident_response(outcome.resident),
        invoice=InvoiceResponse.model_validate(outcome.invoice) if outcome.invoice else None,
        lead_id=outcome.lead_id,
        lead_deleted=outcome.lead_deleted,
        studio_claimed=outcome.studio_claimed,
        unit_warning=outcome.unit_warning,
        invoice_warning=outcome.invoice_warning,
        lead_warning=outcome.lead_warning,
    )


@router.post("", response_model=LeadResponse, status_code=status.HTTP_201_CREATED)
async def create_lead(
    data: LeadCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record a new inquiry."""
    return await LeadStore(db).create(data.model_dump())


@router.get("", response_model=List[LeadResponse])
async def list_leads(
    status_filter: Optional[str] = Query(None, alias="status"),
    source: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """List leads, newest first."""
    return await LeadStore(db).list_all(status=status_filter, source=source)


@router.post("/bulk-delete", response_model=LeadBulkDeleteResponse)
async def bulk_delete_leads(
    data: LeadBulkDelete,
    db: AsyncSession = Depends(get_db),
):
    """Delete several leads. Unknown ids are ignored."""
    deleted = await LeadStore(db).bulk_delete(data.ids)
    return LeadBulkDeleteResponse(deleted=deleted)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(
    lead_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get a lead by ID."""
    lead = await LeadStore(db).get(lead_id)
    if not lead:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")
    return lead


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(
    lead_id: int,
    data: LeadUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a lead."""
    try:
        return await LeadStore(db).update(lead_id, data.model_dump(exclude_unset=True))
    except LodgeFlowError as e:
        raise to_http_exception(e)


@router.delete("/{lead_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lead(
    lead_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Delete a lead without converting it."""
    try:
        await LeadStore(db).delete(lead_id)
    except LodgeFlowError as e:
        raise to_http_exception(e)


@router.post(
    "/{lead_id}/convert",
    response_model=LeadConversionResponse,
    status_code=status.HTTP_201_CREATED,
)
async def convert_lead(
    lead_id: int,
    data: LeadConversionRequest,
    db: AsyncSession = Depends(get_db),
    reconciler: OccupancyReconciler = Depends(get_reconciler),
):
    """Convert a lead into a student or tourist.

    The resident variant comes from `stay_type` or, failing that, the
    duration label. Studio claim, invoice and lead deletion are best-effort
    and reported as warnings on a 201 response.
    """
    lead = await LeadStore(db).get(lead_id)
    if not lead:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Lead not found")

    plans = []
    if data.payment_plan_id is not None:
        plans = await PaymentPlanStore(db).list_all(active_only=False)

    try:
        outcome = await reconciler.convert_lead(data, lead=lead, payment_plans=plans)
    except LodgeFlowError as e:
        raise to_http_exception(e)

    return conversion_response(outcome)
