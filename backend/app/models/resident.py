"""Student (long-stay) and Tourist (short-stay) resident models."""

from datetime import datetime, date
from typing import Optional

from sqlalchemy import String, DateTime, Date, ForeignKey, Enum as SQLEnum, Text, BigInteger, Integer, Boolean, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.models.enums import ResidentType, TouristStatus


class Student(Base):
    """A long-stay resident (academic-year tenancy)."""

    __tablename__ = "students"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    room_grade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    checkin: Mapped[date] = mapped_column(Date, nullable=False)
    duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Money (INTEGER PENCE)
    revenue_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    assigned_to: Mapped[Optional[str]] = mapped_column(
        String(50),
        ForeignKey("studios.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    # Payment plan (plans are reference data; the id is kept even if the plan is gone)
    payment_plan_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    wants_installments: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    installment_plan_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    payment_cycles: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    resident_type = ResidentType.STUDENT


class Tourist(Base):
    """A short-stay guest. Always has both check-in and check-out dates."""

    __tablename__ = "tourists"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    room_grade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    checkin: Mapped[date] = mapped_column(Date, nullable=False)
    checkout: Mapped[date] = mapped_column(Date, nullable=False)
    duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    revenue_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    assigned_to: Mapped[Optional[str]] = mapped_column(
        String(50),
        ForeignKey("studios.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    status: Mapped[TouristStatus] = mapped_column(
        SQLEnum(TouristStatus),
        default=TouristStatus.ACTIVE,
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    __table_args__ = (
        CheckConstraint("checkout >= checkin", name="ck_tourist_checkout_after_checkin"),
    )

    resident_type = ResidentType.TOURIST


RESIDENT_MODELS = {
    ResidentType.STUDENT: Student,
    ResidentType.TOURIST: Tourist,
}
