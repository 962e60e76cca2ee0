from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Index, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from salon_api.core.id_utils import generate_shortuuid
from salon_api.db.base import Base


class ServiceHistory(Base):
    """A completed service at the point of sale."""

    __tablename__ = "service_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    service_date_time: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)
    salon_id: Mapped[str] = mapped_column(String(36), ForeignKey("salons.id"), nullable=False, index=True)
    hairdresser_id: Mapped[str] = mapped_column(String(36), ForeignKey("hairdressers.id"), nullable=False, index=True)
    service_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("services.id", ondelete="SET NULL"), nullable=True
    )
    service_name: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    price_salon: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    price_coiffeur: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    payment_method: Mapped[str] = mapped_column(String(20), nullable=False, default="cash", server_default="cash")

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_service_history_hairdresser_date", "hairdresser_id", "service_date_time"),
        Index("ix_service_history_salon_date", "salon_id", "service_date_time"),
    )
