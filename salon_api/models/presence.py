import datetime

from sqlalchemy import Date, DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from salon_api.core.id_utils import generate_shortuuid
from salon_api.db.base import Base


class Presence(Base):
    __tablename__ = "presence"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    hairdresser_id: Mapped[str] = mapped_column(String(36), ForeignKey("hairdressers.id"), nullable=False, index=True)
    salon_id: Mapped[str] = mapped_column(String(36), ForeignKey("salons.id"), nullable=False, index=True)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False, index=True)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("hairdresser_id", "salon_id", "date", name="ux_presence_hairdresser_salon_date"),
    )
