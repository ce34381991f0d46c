"""Services for LodgeFlow."""

from app.services.audit import AuditService
from app.services.invoices import InvoiceService, PaymentPlanStore
from app.services.leads import LeadStore
from app.services.residents import ResidentStore
from app.services.studios import StudioStore
from app.services.reconciler import OccupancyReconciler, classify_duration

__all__ = [
    "AuditService",
    "InvoiceService",
    "PaymentPlanStore",
    "LeadStore",
    "ResidentStore",
    "StudioStore",
    "OccupancyReconciler",
    "classify_duration",
]
