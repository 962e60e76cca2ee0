from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import today
from salon_api.core.deps import commit_or_conflict, get_db, parse_month_or_400
from salon_api.core.money import money_float
from salon_api.models.expense import FixedExpense, FixedExpenseAmount
from salon_api.models.salon import Salon
from salon_api.schemas.fixed_expense import (
    FixedExpenseAmountIn,
    FixedExpenseAmountOut,
    FixedExpenseAmountSetOut,
    FixedExpenseCreate,
    FixedExpenseDeleteOut,
    FixedExpenseDetailOut,
    FixedExpenseOut,
    FixedExpenseTotalOut,
    FixedExpenseUpdate,
    FixedExpenseWithAmountOut,
)
from salon_api.services import fixed_expense_service

router = APIRouter(prefix="/fixed-expenses", tags=["fixed-expenses"])

FIXED_EXPENSE_NOT_FOUND = "Dépense fixe non trouvée"


def _fixed_expense_fields(expense: FixedExpense, salon_name: str | None = None) -> dict:
    return {
        "id": expense.id,
        "salon_id": expense.salon_id,
        "category": expense.category,
        "name": expense.name,
        "description": expense.description,
        "is_active": expense.is_active,
        "created_at": expense.created_at,
        "salon_name": salon_name,
    }


def _amount_out(row: FixedExpenseAmount) -> FixedExpenseAmountOut:
    return FixedExpenseAmountOut(
        id=row.id,
        fixed_expense_id=row.fixed_expense_id,
        amount=money_float(row.amount),
        effective_from=row.effective_from,
        created_at=row.created_at,
    )


def _expense_with_salon(db: Session, fixed_expense_id: str) -> tuple[FixedExpense, str | None]:
    row = db.execute(
        select(FixedExpense, Salon.name)
        .outerjoin(Salon, Salon.id == FixedExpense.salon_id)
        .where(FixedExpense.id == fixed_expense_id)
    ).first()
    if not row:
        raise HTTPException(status_code=404, detail=FIXED_EXPENSE_NOT_FOUND)
    return row[0], row[1]


@router.get(
    "",
    response_model=list[FixedExpenseWithAmountOut],
    summary="Active fixed expenses with the amount in force",
    description=(
        "`amount` is the amount in force on the first day of `month` (YYYY-MM), or today "
        "when `month` is omitted; zero when the history starts later."
    ),
    responses=error_responses(400, 500),
)
def list_fixed_expenses(
    salon_id: Optional[str] = None,
    month: Optional[str] = None,
    db: Session = Depends(get_db),
):
    target_date = parse_month_or_400(month) if month else today()
    stmt = (
        select(
            FixedExpense,
            Salon.name,
            fixed_expense_service.effective_amount_column(target_date),
            fixed_expense_service.effective_from_column(target_date),
        )
        .outerjoin(Salon, Salon.id == FixedExpense.salon_id)
        .where(FixedExpense.is_active.is_(True))
    )
    if salon_id:
        stmt = stmt.where(FixedExpense.salon_id == salon_id)
    rows = db.execute(stmt.order_by(FixedExpense.category, FixedExpense.name)).all()
    return [
        FixedExpenseWithAmountOut(
            **_fixed_expense_fields(expense, salon_name),
            amount=money_float(amount),
            amount_effective_from=effective_from,
        )
        for expense, salon_name, amount, effective_from in rows
    ]


@router.get(
    "/total/{month}",
    response_model=FixedExpenseTotalOut,
    summary="Total fixed costs for a month",
    responses=error_responses(400, 500),
)
def get_fixed_total(month: str, salon_id: Optional[str] = None, db: Session = Depends(get_db)):
    first_day = parse_month_or_400(month)
    total = fixed_expense_service.get_total_for_date(db, first_day, salon_id=salon_id)
    return FixedExpenseTotalOut(total=money_float(total))


@router.get(
    "/{fixed_expense_id}",
    response_model=FixedExpenseDetailOut,
    summary="Fixed expense with its amount history",
    responses=error_responses(404, 500),
)
def get_fixed_expense(fixed_expense_id: str, db: Session = Depends(get_db)):
    expense, salon_name = _expense_with_salon(db, fixed_expense_id)
    history = fixed_expense_service.list_amount_history(db, expense.id)
    return FixedExpenseDetailOut(
        **_fixed_expense_fields(expense, salon_name),
        amounts=[_amount_out(row) for row in history],
    )


@router.get("/{fixed_expense_id}/history", response_model=list[FixedExpenseAmountOut], summary="Amount history")
def get_amount_history(fixed_expense_id: str, db: Session = Depends(get_db)):
    return [_amount_out(row) for row in fixed_expense_service.list_amount_history(db, fixed_expense_id)]


@router.post(
    "",
    response_model=FixedExpenseWithAmountOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create fixed expense",
    description="The expense and its initial amount are stored together or not at all.",
    responses=error_responses(400, 409, 500),
)
def create_fixed_expense(payload: FixedExpenseCreate, db: Session = Depends(get_db)):
    effective_from = payload.effective_from or today()
    try:
        expense, initial = fixed_expense_service.create_fixed_expense(
            db,
            name=payload.name,
            amount=payload.amount,
            effective_from=effective_from,
            salon_id=payload.salon_id or None,
            category=payload.category,
            description=payload.description or "",
        )
    except IntegrityError:
        raise HTTPException(status_code=409, detail="Salon inconnu") from None
    return FixedExpenseWithAmountOut(
        **_fixed_expense_fields(expense),
        amount=money_float(initial.amount),
        amount_effective_from=initial.effective_from,
    )


@router.put(
    "/{fixed_expense_id}",
    response_model=FixedExpenseOut,
    summary="Update fixed expense details",
    description="Amounts are versioned separately, see `POST /{id}/amount`.",
    responses=error_responses(400, 404, 409, 500),
)
def update_fixed_expense(fixed_expense_id: str, payload: FixedExpenseUpdate, db: Session = Depends(get_db)):
    expense, _ = _expense_with_salon(db, fixed_expense_id)
    fields = payload.model_fields_set

    if "salon_id" in fields:
        expense.salon_id = payload.salon_id or None
    if "category" in fields and payload.category:
        expense.category = payload.category.strip() or "other"
    if "name" in fields and payload.name is not None:
        expense.name = payload.name
    if "description" in fields:
        expense.description = payload.description or ""
    if "is_active" in fields and payload.is_active is not None:
        expense.is_active = payload.is_active

    commit_or_conflict(db, detail="Salon inconnu")
    expense, salon_name = _expense_with_salon(db, fixed_expense_id)
    return FixedExpenseOut(**_fixed_expense_fields(expense, salon_name))


@router.post(
    "/{fixed_expense_id}/amount",
    response_model=FixedExpenseAmountSetOut,
    summary="Set the amount from a date",
    description=(
        "Overwrites the amount when one already starts on `effective_from`, "
        "adds a new version otherwise. Earlier versions are kept."
    ),
    responses=error_responses(400, 404, 409, 500),
)
def set_fixed_expense_amount(
    fixed_expense_id: str,
    payload: FixedExpenseAmountIn,
    db: Session = Depends(get_db),
):
    if db.get(FixedExpense, fixed_expense_id) is None:
        raise HTTPException(status_code=404, detail=FIXED_EXPENSE_NOT_FOUND)
    try:
        row, _ = fixed_expense_service.upsert_amount(
            db,
            fixed_expense_id,
            amount=payload.amount,
            effective_from=payload.effective_from,
        )
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Conflit sur le montant") from None
    return FixedExpenseAmountSetOut(
        message="Montant mis à jour",
        amount=money_float(row.amount),
        effective_from=row.effective_from,
    )


@router.delete(
    "/{fixed_expense_id}",
    response_model=FixedExpenseDeleteOut,
    summary="Deactivate fixed expense",
    description="Soft delete; the amount history is kept.",
    responses=error_responses(404, 500),
)
def delete_fixed_expense(fixed_expense_id: str, db: Session = Depends(get_db)):
    expense, salon_name = _expense_with_salon(db, fixed_expense_id)
    expense.is_active = False
    db.commit()
    db.refresh(expense)
    return FixedExpenseDeleteOut(
        message="Dépense fixe supprimée",
        expense=FixedExpenseOut(**_fixed_expense_fields(expense, salon_name)),
    )
