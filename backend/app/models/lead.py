"""Lead model (inbound inquiry not yet converted)."""

from datetime import datetime, date
from typing import Optional

from sqlalchemy import String, DateTime, Date, Text, BigInteger, Integer
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class Lead(Base):
    """An inquiry. Deleted by a successful conversion."""

    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    # Pipeline fields are free text, configured per deployment
    status: Mapped[str] = mapped_column(String(50), default="New", nullable=False, index=True)
    source: Mapped[Optional[str]] = mapped_column(String(100), nullable=True, index=True)
    response_category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    follow_up_stage: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    room_grade: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    duration: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    # Intended studio; not an occupancy claim
    assigned_to: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    revenue_cents: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    date_of_inquiry: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
