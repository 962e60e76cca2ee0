from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import month_start, next_month_start, today
from salon_api.core.deps import commit_or_conflict, get_db, parse_month_or_400
from salon_api.core.money import money_float, to_money
from salon_api.models.expense import Expense
from salon_api.models.salon import Salon
from salon_api.schemas.expense import (
    ExpenseCategoryOut,
    ExpenseCreate,
    ExpenseDeleteOut,
    ExpenseOut,
    ExpenseUpdate,
)

router = APIRouter(prefix="/expenses", tags=["expenses"])

EXPENSE_NOT_FOUND = "Dépense non trouvée"

EXPENSE_CATEGORIES = (
    ("rent", "Loyer"),
    ("utilities", "Charges (eau, électricité)"),
    ("supplies", "Fournitures"),
    ("marketing", "Marketing"),
    ("equipment", "Équipement"),
    ("maintenance", "Maintenance"),
    ("insurance", "Assurance"),
    ("taxes", "Taxes"),
    ("payroll", "Charges salariales"),
    ("other", "Autre"),
)


def _expense_out(expense: Expense, salon_name: str | None = None) -> ExpenseOut:
    return ExpenseOut(
        id=expense.id,
        salon_id=expense.salon_id,
        type=expense.type,
        category=expense.category,
        amount=money_float(expense.amount),
        date=expense.date,
        description=expense.description,
        created_at=expense.created_at,
        salon_name=salon_name,
    )


def _joined_stmt():
    return (
        select(Expense, Salon.name)
        .outerjoin(Salon, Salon.id == Expense.salon_id)
        .order_by(Expense.date.desc())
    )


def _expense_or_404(db: Session, expense_id: str) -> Expense:
    expense = db.get(Expense, expense_id)
    if not expense:
        raise HTTPException(status_code=404, detail=EXPENSE_NOT_FOUND)
    return expense


@router.get("", response_model=list[ExpenseOut], summary="List expenses", responses=error_responses(400, 500))
def list_expenses(
    salon_id: Optional[str] = None,
    month: Optional[str] = None,
    category: Optional[str] = None,
    type: Optional[str] = None,
    db: Session = Depends(get_db),
):
    stmt = _joined_stmt()
    if salon_id:
        stmt = stmt.where(Expense.salon_id == salon_id)
    if month:
        first_day = parse_month_or_400(month)
        stmt = stmt.where(Expense.date >= first_day, Expense.date < next_month_start(first_day))
    if category:
        stmt = stmt.where(Expense.category == category)
    if type:
        stmt = stmt.where(Expense.type == type)
    return [_expense_out(expense, salon_name) for expense, salon_name in db.execute(stmt).all()]


@router.get("/month", response_model=list[ExpenseOut], summary="This month's expenses")
def list_month_expenses(db: Session = Depends(get_db)):
    first_day = month_start(today())
    rows = db.execute(
        _joined_stmt().where(Expense.date >= first_day, Expense.date < next_month_start(first_day))
    ).all()
    return [_expense_out(expense, salon_name) for expense, salon_name in rows]


@router.get("/salon/{salon_id}", response_model=list[ExpenseOut])
def list_salon_expenses(salon_id: str, db: Session = Depends(get_db)):
    rows = db.execute(_joined_stmt().where(Expense.salon_id == salon_id)).all()
    return [_expense_out(expense, salon_name) for expense, salon_name in rows]


@router.get("/categories", response_model=list[ExpenseCategoryOut], summary="Expense categories")
def list_expense_categories():
    return [ExpenseCategoryOut(value=value, label=label) for value, label in EXPENSE_CATEGORIES]


@router.get("/{expense_id}", response_model=ExpenseOut, responses=error_responses(404, 500))
def get_expense(expense_id: str, db: Session = Depends(get_db)):
    row = db.execute(_joined_stmt().where(Expense.id == expense_id)).first()
    if not row:
        raise HTTPException(status_code=404, detail=EXPENSE_NOT_FOUND)
    return _expense_out(*row)


@router.post(
    "",
    response_model=ExpenseOut,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400, 409, 500),
)
def create_expense(payload: ExpenseCreate, db: Session = Depends(get_db)):
    expense = Expense(
        salon_id=payload.salon_id or None,
        type=payload.type,
        category=payload.category,
        amount=to_money(payload.amount),
        date=payload.date or today(),
        description=payload.description or "",
    )
    db.add(expense)
    commit_or_conflict(db, detail="Salon inconnu")
    db.refresh(expense)
    return _expense_out(expense)


@router.put("/{expense_id}", response_model=ExpenseOut, responses=error_responses(400, 404, 409, 500))
def update_expense(expense_id: str, payload: ExpenseUpdate, db: Session = Depends(get_db)):
    expense = _expense_or_404(db, expense_id)
    fields = payload.model_fields_set

    if "salon_id" in fields:
        expense.salon_id = payload.salon_id or None
    for name in ("type", "category", "date"):
        if name in fields and getattr(payload, name) is not None:
            setattr(expense, name, getattr(payload, name))
    if "amount" in fields and payload.amount is not None:
        expense.amount = to_money(payload.amount)
    if "description" in fields:
        expense.description = payload.description or ""

    commit_or_conflict(db, detail="Salon inconnu")
    db.refresh(expense)
    return _expense_out(expense)


@router.delete("/{expense_id}", response_model=ExpenseDeleteOut, responses=error_responses(404, 500))
def delete_expense(expense_id: str, db: Session = Depends(get_db)):
    expense = _expense_or_404(db, expense_id)
    deleted = _expense_out(expense)
    db.delete(expense)
    db.commit()
    return ExpenseDeleteOut(message="Dépense supprimée", expense=deleted)
