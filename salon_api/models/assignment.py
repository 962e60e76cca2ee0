from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from salon_api.core.id_utils import generate_shortuuid
from salon_api.db.base import Base

COMPENSATION_TYPES = ("commission", "fixed")


class Assignment(Base):
    __tablename__ = "assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    hairdresser_id: Mapped[str] = mapped_column(String(36), ForeignKey("hairdressers.id"), nullable=False, index=True)
    salon_id: Mapped[str] = mapped_column(String(36), ForeignKey("salons.id"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    # open-ended contract when null
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    compensation_type: Mapped[str] = mapped_column(
        String(20), nullable=False, default="commission", server_default="commission"
    )
    commission_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=50, server_default="50")
    tax_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=0, server_default="0")
    fixed_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_assignments_salon_start_date", "salon_id", "start_date"),
    )
