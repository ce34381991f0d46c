"""Enumeration types for the LodgeFlow domain model."""

from enum import Enum


class ResidentType(str, Enum):
    """Resident variant, decided by stay length."""
    STUDENT = "student"  # Long-stay resident
    TOURIST = "tourist"  # Short-stay guest


class TouristStatus(str, Enum):
    """Status of a short-stay booking."""
    ACTIVE = "active"
    CHECKED_OUT = "checked_out"
    CANCELLED = "cancelled"


class InvoiceStatus(str, Enum):
    """Status of an invoice."""
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class AuditAction(str, Enum):
    """Actions tracked in audit log."""
    LEAD_CONVERTED = "lead_converted"
    RESIDENT_CREATED = "resident_created"
    RESIDENT_REASSIGNED = "resident_reassigned"
    RESIDENT_DELETED = "resident_deleted"
    STUDIO_RELEASED = "studio_released"


class OccupancyIssueKind(str, Enum):
    """Divergence between studio occupancy and resident assignment."""
    OCCUPIED_WITHOUT_OCCUPANT = "occupied_without_occupant"
    OCCUPANT_WITHOUT_FLAG = "occupant_without_flag"
    OCCUPANT_MISSING = "occupant_missing"
    OCCUPANT_ASSIGNED_ELSEWHERE = "occupant_assigned_elsewhere"
    RESIDENT_IN_VACANT_STUDIO = "resident_in_vacant_studio"
    RESIDENT_IN_FOREIGN_STUDIO = "resident_in_foreign_studio"
    RESIDENT_IN_UNKNOWN_STUDIO = "resident_in_unknown_studio"
