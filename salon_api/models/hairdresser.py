from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from salon_api.core.id_utils import generate_shortuuid
from salon_api.db.base import Base


class Hairdresser(Base):
    __tablename__ = "hairdressers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    matricule: Mapped[Optional[str]] = mapped_column(String(50), unique=True, nullable=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    phone: Mapped[str] = mapped_column(String(50), nullable=False, default="", server_default="")
    # bank account identifiers (RIB)
    rib_1: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    rib_2: Mapped[str] = mapped_column(String(100), nullable=False, default="", server_default="")
    tax_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
