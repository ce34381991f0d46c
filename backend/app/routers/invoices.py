"""Invoices and payment plans routers."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import LodgeFlowError, to_http_exception
from app.models.enums import InvoiceStatus, ResidentType
from app.schemas.invoice import (
    InvoiceUpdate,
    InvoiceResponse,
    PaymentPlanCreate,
    PaymentPlanResponse,
)
from app.services.invoices import InvoiceService, PaymentPlanStore

router = APIRouter(prefix="/invoices", tags=["invoices"])
payment_plans_router = APIRouter(prefix="/payment-plans", tags=["payment-plans"])


@router.get("", response_model=List[InvoiceResponse])
async def list_invoices(
    resident_type: Optional[ResidentType] = None,
    resident_id: Optional[int] = None,
    status_filter: Optional[InvoiceStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    """List invoices, optionally for one resident or in one status."""
    return await InvoiceService(db).list_all(
        resident_type=resident_type,
        resident_id=resident_id,
        status=status_filter,
    )


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(
    invoice_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Get an invoice by ID."""
    invoice = await InvoiceService(db).get(invoice_id)
    if not invoice:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Invoice not found")
    return invoice


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: int,
    data: InvoiceUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update invoice status, due date or notes."""
    try:
        return await InvoiceService(db).update(invoice_id, data.model_dump(exclude_unset=True))
    except LodgeFlowError as e:
        raise to_http_exception(e)


@payment_plans_router.get("", response_model=List[PaymentPlanResponse])
async def list_payment_plans(
    include_inactive: bool = False,
    db: AsyncSession = Depends(get_db),
):
    """List installment plans."""
    return await PaymentPlanStore(db).list_all(active_only=not include_inactive)


@payment_plans_router.post("", response_model=PaymentPlanResponse, status_code=status.HTTP_201_CREATED)
async def create_payment_plan(
    data: PaymentPlanCreate,
    db: AsyncSession = Depends(get_db),
):
    """Create an installment plan."""
    return await PaymentPlanStore(db).create(data.model_dump())
