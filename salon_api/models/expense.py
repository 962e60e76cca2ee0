import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Index, Numeric, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from salon_api.core.id_utils import generate_shortuuid
from salon_api.db.base import Base


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    salon_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("salons.id"), nullable=True, index=True)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="variable", server_default="variable")
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="other", server_default="other")
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=0, server_default="0")
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("ix_expenses_salon_date", "salon_id", "date"),
    )


class FixedExpense(Base):
    """A recurring cost whose amount is versioned by effective date.

    ``salon_id`` is null for costs carried by the whole chain. Rows are never
    removed once they have amount history; deletion clears ``is_active``.
    """

    __tablename__ = "fixed_expenses"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    salon_id: Mapped[Optional[str]] = mapped_column(String(36), ForeignKey("salons.id"), nullable=True, index=True)
    category: Mapped[str] = mapped_column(String(50), nullable=False, default="other", server_default="other")
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="", server_default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, server_default="1")

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, server_default=func.now())

    amounts: Mapped[list["FixedExpenseAmount"]] = relationship(
        back_populates="fixed_expense",
        order_by="FixedExpenseAmount.effective_from.desc()",
    )


class FixedExpenseAmount(Base):
    __tablename__ = "fixed_expense_amounts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=generate_shortuuid)
    fixed_expense_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("fixed_expenses.id"), nullable=False, index=True
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    effective_from: Mapped[datetime.date] = mapped_column(Date, nullable=False)

    created_at: Mapped[datetime.datetime] = mapped_column(DateTime, server_default=func.now())

    fixed_expense: Mapped[FixedExpense] = relationship(back_populates="amounts")

    __table_args__ = (
        UniqueConstraint("fixed_expense_id", "effective_from", name="ux_fixed_expense_amounts_expense_date"),
    )
