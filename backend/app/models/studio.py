"""Studio (allocatable unit) model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import String, DateTime, Enum as SQLEnum, Integer, Boolean, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.enums import ResidentType


class Studio(Base):
    """A rentable studio.

    Occupancy is owned by the reconciler: `occupied` is true exactly when
    `occupied_by` references a resident of type `occupied_by_type`.
    """

    __tablename__ = "studios"

    id: Mapped[str] = mapped_column(String(50), primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    view: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    floor: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    room_grade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)

    # Occupancy
    occupied: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False, index=True)
    occupied_by: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    occupied_by_type: Mapped[Optional[ResidentType]] = mapped_column(
        SQLEnum(ResidentType),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        CheckConstraint(
            "(occupied AND occupied_by IS NOT NULL) OR (NOT occupied AND occupied_by IS NULL)",
            name="ck_studio_occupancy_consistent",
        ),
    )
