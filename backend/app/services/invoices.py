"""Invoice and payment plan services."""

import logging
import time
from datetime import date, timedelta
from typing import Any, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.core.exceptions import InvoiceNotFound
from app.models.enums import InvoiceStatus, ResidentType
from app.models.invoice import Invoice, PaymentPlan

logger = logging.getLogger(__name__)

INVOICE_PREFIXES = {
    ResidentType.STUDENT: "STU",
    ResidentType.TOURIST: "TOU",
}


class InvoiceService:
    """Creates and maintains resident invoices."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.settings = get_settings()

    async def _commit(self) -> None:
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise

    def _due_days(self, variant: ResidentType) -> int:
        if variant == ResidentType.TOURIST:
            return self.settings.tourist_invoice_due_days
        return self.settings.student_invoice_due_days

    async def create_for_resident(self, variant: ResidentType, resident) -> Invoice:
        """Issue the first invoice for a new resident.

        Amount is the resident's revenue; due in 30 days for students and
        7 days for tourists (configurable).
        """
        issued = date.today()
        invoice = Invoice(
            invoice_number=f"INV-{INVOICE_PREFIXES[variant]}-{resident.id}-{time.time_ns() // 1_000_000}",
            student_id=resident.id if variant == ResidentType.STUDENT else None,
            tourist_id=resident.id if variant == ResidentType.TOURIST else None,
            payment_plan_id=getattr(resident, "payment_plan_id", None),
            amount_cents=resident.revenue_cents or 0,
            currency=self.settings.default_currency,
            status=InvoiceStatus.PENDING,
            issued_date=issued,
            due_date=issued + timedelta(days=self._due_days(variant)),
            description=(
                f"Short-term stay fees for {resident.name}"
                if variant == ResidentType.TOURIST
                else f"Accommodation fees for {resident.name}"
            ),
        )
        self.db.add(invoice)
        await self._commit()
        await self.db.refresh(invoice)
        logger.info(f"[INVOICE] {invoice.invoice_number} issued to {variant.value} {resident.id}")
        return invoice

    async def get(self, invoice_id: int) -> Optional[Invoice]:
        result = await self.db.execute(
            select(Invoice)
            .where(Invoice.id == invoice_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def list_all(
        self,
        resident_type: Optional[ResidentType] = None,
        resident_id: Optional[int] = None,
        status: Optional[InvoiceStatus] = None,
    ) -> Sequence[Invoice]:
        query = select(Invoice)
        if resident_type == ResidentType.STUDENT:
            query = query.where(Invoice.student_id.is_not(None))
            if resident_id is not None:
                query = query.where(Invoice.student_id == resident_id)
        elif resident_type == ResidentType.TOURIST:
            query = query.where(Invoice.tourist_id.is_not(None))
            if resident_id is not None:
                query = query.where(Invoice.tourist_id == resident_id)
        if status:
            query = query.where(Invoice.status == status)
        result = await self.db.execute(query.order_by(Invoice.id.desc()))
        return result.scalars().all()

    async def update(self, invoice_id: int, changes: dict[str, Any]) -> Invoice:
        invoice = await self.get(invoice_id)
        if invoice is None:
            raise InvoiceNotFound(invoice_id)
        for field, value in changes.items():
            setattr(invoice, field, value)
        await self._commit()
        await self.db.refresh(invoice)
        return invoice


class PaymentPlanStore:
    """Reference data for installment plans."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self, active_only: bool = True) -> Sequence[PaymentPlan]:
        query = select(PaymentPlan)
        if active_only:
            query = query.where(PaymentPlan.is_active.is_(True))
        result = await self.db.execute(query.order_by(PaymentPlan.duration_weeks, PaymentPlan.payment_cycles))
        return result.scalars().all()

    async def create(self, data: dict[str, Any]) -> PaymentPlan:
        plan = PaymentPlan(**data)
        self.db.add(plan)
        try:
            await self.db.commit()
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        await self.db.refresh(plan)
        return plan
