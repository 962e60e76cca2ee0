from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, DateTime, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from salon_api.core.id_utils import generate_shortuuid
from salon_api.db.base import Base


class SalaryCost(Base):
    """One payroll line for a month, as imported from the payroll spreadsheet."""

    __tablename__ = "salary_costs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    hairdresser_id: Mapped[Optional[str]] = mapped_column(
        String(36), ForeignKey("hairdressers.id", ondelete="SET NULL"), nullable=True, index=True
    )
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    net_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    gross_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    total_cost: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    charges: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        Index("ix_salary_costs_year_month", "year", "month"),
    )


class SalaryPayment(Base):
    __tablename__ = "salary_payments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    salary_cost_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("salary_costs.id", ondelete="CASCADE"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    payment_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_method: Mapped[str] = mapped_column(String(30), nullable=False, default="virement", server_default="virement")
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
