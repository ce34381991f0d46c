"""SQLAlchemy models for LodgeFlow."""

from app.models.studio import Studio
from app.models.resident import Student, Tourist, RESIDENT_MODELS
from app.models.lead import Lead
from app.models.invoice import Invoice, PaymentPlan
from app.models.audit import AuditLog

__all__ = [
    "Studio",
    "Student",
    "Tourist",
    "RESIDENT_MODELS",
    "Lead",
    "Invoice",
    "PaymentPlan",
    "AuditLog",
]
