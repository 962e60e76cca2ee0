from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.money import money_float, to_money
from salon_api.models.payroll import SalaryPayment
from salon_api.schemas.payroll import (
    SalaryPaymentCreate,
    SalaryPaymentDeleteOut,
    SalaryPaymentOut,
    SalaryPaymentTotalOut,
    SalaryPaymentTotalsIn,
    SalaryPaymentUpdate,
)

router = APIRouter(prefix="/salary-payments", tags=["salary-payments"])

PAYMENT_NOT_FOUND = "Paiement non trouvé"


def _payment_out(payment: SalaryPayment) -> SalaryPaymentOut:
    return SalaryPaymentOut(
        id=payment.id,
        salary_cost_id=payment.salary_cost_id,
        amount=money_float(payment.amount),
        payment_date=payment.payment_date,
        payment_method=payment.payment_method,
        notes=payment.notes,
        created_at=payment.created_at,
    )


def _payment_or_404(db: Session, payment_id: str) -> SalaryPayment:
    payment = db.get(SalaryPayment, payment_id)
    if not payment:
        raise HTTPException(status_code=404, detail=PAYMENT_NOT_FOUND)
    return payment


@router.get("/by-salary/{salary_cost_id}", response_model=list[SalaryPaymentOut], summary="Payments of a salary line")
def list_payments_for_salary(salary_cost_id: str, db: Session = Depends(get_db)):
    rows = db.execute(
        select(SalaryPayment)
        .where(SalaryPayment.salary_cost_id == salary_cost_id)
        .order_by(SalaryPayment.payment_date.desc(), SalaryPayment.created_at.desc())
    ).scalars()
    return [_payment_out(row) for row in rows]


@router.get("/total/{salary_cost_id}", response_model=SalaryPaymentTotalOut, summary="Total paid on a salary line")
def get_total_paid(salary_cost_id: str, db: Session = Depends(get_db)):
    total = db.execute(
        select(func.coalesce(func.sum(SalaryPayment.amount), 0)).where(
            SalaryPayment.salary_cost_id == salary_cost_id
        )
    ).scalar_one()
    return SalaryPaymentTotalOut(total_paid=money_float(total))


@router.post(
    "/totals",
    response_model=dict[str, float],
    summary="Total paid per salary line",
    description="Lines without any payment are left out of the map.",
)
def get_totals_paid(payload: SalaryPaymentTotalsIn, db: Session = Depends(get_db)):
    if not payload.salary_cost_ids:
        return {}
    rows = db.execute(
        select(SalaryPayment.salary_cost_id, func.coalesce(func.sum(SalaryPayment.amount), 0))
        .where(SalaryPayment.salary_cost_id.in_(payload.salary_cost_ids))
        .group_by(SalaryPayment.salary_cost_id)
    ).all()
    return {salary_cost_id: money_float(total) for salary_cost_id, total in rows}


@router.post(
    "",
    response_model=SalaryPaymentOut,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400, 409, 500),
)
def create_payment(payload: SalaryPaymentCreate, db: Session = Depends(get_db)):
    if not payload.salary_cost_id or not payload.amount or not payload.payment_date:
        raise HTTPException(status_code=400, detail="salary_cost_id, amount et payment_date sont requis")
    payment = SalaryPayment(
        salary_cost_id=payload.salary_cost_id,
        amount=to_money(payload.amount),
        payment_date=payload.payment_date,
        payment_method=payload.payment_method or "virement",
        notes=payload.notes or None,
    )
    db.add(payment)
    commit_or_conflict(db, detail="Coût salaire inconnu")
    db.refresh(payment)
    return _payment_out(payment)


@router.put("/{payment_id}", response_model=SalaryPaymentOut, responses=error_responses(400, 404, 500))
def update_payment(payment_id: str, payload: SalaryPaymentUpdate, db: Session = Depends(get_db)):
    payment = _payment_or_404(db, payment_id)
    fields = payload.model_fields_set
    if "amount" in fields and payload.amount is not None:
        payment.amount = to_money(payload.amount)
    if "payment_date" in fields and payload.payment_date is not None:
        payment.payment_date = payload.payment_date
    if "payment_method" in fields and payload.payment_method:
        payment.payment_method = payload.payment_method
    if "notes" in fields:
        payment.notes = payload.notes or None
    db.commit()
    db.refresh(payment)
    return _payment_out(payment)


@router.delete("/{payment_id}", response_model=SalaryPaymentDeleteOut, responses=error_responses(404, 500))
def delete_payment(payment_id: str, db: Session = Depends(get_db)):
    payment = _payment_or_404(db, payment_id)
    deleted = _payment_out(payment)
    db.delete(payment)
    db.commit()
    return SalaryPaymentDeleteOut(message="Paiement supprimé", deleted=deleted)
