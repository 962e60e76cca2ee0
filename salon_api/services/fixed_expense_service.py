"""Effective-dated amounts for fixed expenses.

A fixed expense carries a history of ``(amount, effective_from)`` rows. The amount
in force on a date D is the one with the latest ``effective_from <= D``, or zero
when the history starts after D. Rows are only ever inserted or overwritten on an
exact ``effective_from`` match; nothing here deletes history.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_api.core.money import ZERO_MONEY, to_money
from salon_api.core.observability import log_event
from salon_api.models.expense import FixedExpense, FixedExpenseAmount


@dataclass(frozen=True)
class ResolvedAmount:
    amount: Decimal
    effective_from: date | None


def _latest_amount_stmt(target_date: date):
    return (
        select(FixedExpenseAmount)
        .where(FixedExpenseAmount.effective_from <= target_date)
        .order_by(FixedExpenseAmount.effective_from.desc())
        .limit(1)
    )


def effective_amount_column(target_date: date):
    """Correlated scalar subquery: the amount in force on ``target_date`` for ``FixedExpense.id``."""
    return (
        select(FixedExpenseAmount.amount)
        .where(
            FixedExpenseAmount.fixed_expense_id == FixedExpense.id,
            FixedExpenseAmount.effective_from <= target_date,
        )
        .order_by(FixedExpenseAmount.effective_from.desc())
        .limit(1)
        .correlate(FixedExpense)
        .scalar_subquery()
    )


def effective_from_column(target_date: date):
    return (
        select(FixedExpenseAmount.effective_from)
        .where(
            FixedExpenseAmount.fixed_expense_id == FixedExpense.id,
            FixedExpenseAmount.effective_from <= target_date,
        )
        .order_by(FixedExpenseAmount.effective_from.desc())
        .limit(1)
        .correlate(FixedExpense)
        .scalar_subquery()
    )


def resolve_amount(db: Session, fixed_expense_id: str, target_date: date) -> ResolvedAmount:
    row = db.execute(
        _latest_amount_stmt(target_date).where(
            FixedExpenseAmount.fixed_expense_id == fixed_expense_id
        )
    ).scalar_one_or_none()
    if row is None:
        return ResolvedAmount(amount=ZERO_MONEY, effective_from=None)
    return ResolvedAmount(amount=to_money(row.amount), effective_from=row.effective_from)


def get_effective_amount(db: Session, fixed_expense_id: str, target_date: date) -> Decimal:
    return resolve_amount(db, fixed_expense_id, target_date).amount


def get_total_for_date(db: Session, target_date: date, salon_id: str | None = None) -> Decimal:
    """Sum of the amounts in force on ``target_date`` over active fixed expenses."""
    stmt = select(func.coalesce(func.sum(effective_amount_column(target_date)), 0)).where(
        FixedExpense.is_active.is_(True)
    )
    if salon_id:
        stmt = stmt.where(FixedExpense.salon_id == salon_id)
    return to_money(db.execute(stmt).scalar_one())


def list_amount_history(db: Session, fixed_expense_id: str) -> list[FixedExpenseAmount]:
    return list(
        db.execute(
            select(FixedExpenseAmount)
            .where(FixedExpenseAmount.fixed_expense_id == fixed_expense_id)
            .order_by(FixedExpenseAmount.effective_from.desc())
        ).scalars()
    )


def create_fixed_expense(
    db: Session,
    *,
    name: str,
    amount: Decimal,
    effective_from: date,
    salon_id: str | None = None,
    category: str = "other",
    description: str = "",
) -> tuple[FixedExpense, FixedExpenseAmount]:
    """Insert a fixed expense and its initial amount as one unit.

    Either both rows are committed or the session is rolled back and the error
    propagates.
    """
    expense = FixedExpense(
        salon_id=salon_id,
        category=category,
        name=name,
        description=description,
    )
    try:
        db.add(expense)
        db.flush()
        initial = FixedExpenseAmount(
            fixed_expense_id=expense.id,
            amount=to_money(amount),
            effective_from=effective_from,
        )
        db.add(initial)
        db.commit()
    except Exception:
        db.rollback()
        raise

    db.refresh(expense)
    db.refresh(initial)
    log_event(
        "fixed_expense.create",
        fixed_expense_id=expense.id,
        amount=float(initial.amount),
        effective_from=effective_from.isoformat(),
    )
    return expense, initial


def find_amount(db: Session, fixed_expense_id: str, effective_from: date) -> FixedExpenseAmount | None:
    return db.execute(
        select(FixedExpenseAmount).where(
            FixedExpenseAmount.fixed_expense_id == fixed_expense_id,
            FixedExpenseAmount.effective_from == effective_from,
        )
    ).scalar_one_or_none()


def upsert_amount(
    db: Session,
    fixed_expense_id: str,
    *,
    amount: Decimal,
    effective_from: date,
) -> tuple[FixedExpenseAmount, bool]:
    """Create or replace the amount row keyed on ``(fixed_expense_id, effective_from)``.

    Returns the row and whether it was newly inserted. When another request
    inserts the same version first, that row is overwritten instead.
    """
    row = find_amount(db, fixed_expense_id, effective_from)
    created = row is None
    if row is None:
        row = FixedExpenseAmount(
            fixed_expense_id=fixed_expense_id,
            amount=to_money(amount),
            effective_from=effective_from,
        )
        db.add(row)
    else:
        row.amount = to_money(amount)

    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        row = find_amount(db, fixed_expense_id, effective_from) if created else None
        if row is None:
            raise
        row.amount = to_money(amount)
        created = False
        db.commit()

    db.refresh(row)
    log_event(
        "fixed_expense.amount_upsert",
        fixed_expense_id=fixed_expense_id,
        amount=float(row.amount),
        effective_from=effective_from.isoformat(),
        created=created,
    )
    return row, created
