from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import day_start, month_range, month_start, now_local, today, week_start
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.money import money_float, to_money
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.salon import Salon
from salon_api.models.service import Service
from salon_api.models.service_history import ServiceHistory
from salon_api.schemas.transaction import (
    TransactionCreate,
    TransactionDeleteOut,
    TransactionOut,
    TransactionUpdate,
)

router = APIRouter(prefix="/transactions", tags=["transactions"])

TRANSACTION_NOT_FOUND = "Transaction non trouvée"
UNKNOWN_REFERENCE = "Salon, coiffeur ou prestation inconnu"
SH = ServiceHistory


def transaction_out(
    row: ServiceHistory,
    first_name: str | None = None,
    last_name: str | None = None,
    salon_name: str | None = None,
    service_display_name: str | None = None,
) -> TransactionOut:
    hairdresser_name = " ".join(part for part in (first_name, last_name) if part) or None
    return TransactionOut(
        id=row.id,
        service_date_time=row.service_date_time,
        salon_id=row.salon_id,
        hairdresser_id=row.hairdresser_id,
        service_id=row.service_id,
        service_name=row.service_name,
        price_salon=money_float(row.price_salon),
        price_coiffeur=money_float(row.price_coiffeur),
        payment_method=row.payment_method,
        created_at=row.created_at,
        first_name=first_name,
        last_name=last_name,
        hairdresser_name=hairdresser_name,
        salon_name=salon_name,
        service_display_name=service_display_name,
    )


def _joined_stmt():
    return (
        select(SH, Hairdresser.first_name, Hairdresser.last_name, Salon.name, Service.name)
        .outerjoin(Hairdresser, Hairdresser.id == SH.hairdresser_id)
        .outerjoin(Salon, Salon.id == SH.salon_id)
        .outerjoin(Service, Service.id == SH.service_id)
        .order_by(SH.service_date_time.desc())
    )


def _between_days(first: date, last: date):
    """Inclusive calendar-day range on ``service_date_time``."""
    return (
        SH.service_date_time >= day_start(first),
        SH.service_date_time < day_start(last + timedelta(days=1)),
    )


def _list(db: Session, *conditions) -> list[TransactionOut]:
    rows = db.execute(_joined_stmt().where(*conditions)).all()
    return [transaction_out(*row) for row in rows]


def _transaction_or_404(db: Session, transaction_id: str) -> ServiceHistory:
    row = db.get(SH, transaction_id)
    if not row:
        raise HTTPException(status_code=404, detail=TRANSACTION_NOT_FOUND)
    return row


@router.get("", response_model=list[TransactionOut], summary="List transactions")
def list_transactions(
    salon_id: Optional[str] = None,
    hairdresser_id: Optional[str] = None,
    date: Optional[date] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    conditions = []
    if salon_id:
        conditions.append(SH.salon_id == salon_id)
    if hairdresser_id:
        conditions.append(SH.hairdresser_id == hairdresser_id)
    if date:
        conditions.extend(_between_days(date, date))
    # a range only applies when both bounds are given
    if start_date and end_date:
        conditions.extend(_between_days(start_date, end_date))
    return _list(db, *conditions)


@router.get("/today", response_model=list[TransactionOut], summary="Today's transactions")
def list_today_transactions(db: Session = Depends(get_db)):
    current = today()
    return _list(db, *_between_days(current, current))


@router.get("/week", response_model=list[TransactionOut], summary="This week's transactions (Monday to Sunday)")
def list_week_transactions(db: Session = Depends(get_db)):
    first = week_start(today())
    return _list(db, *_between_days(first, first + timedelta(days=6)))


@router.get("/month", response_model=list[TransactionOut], summary="This month's transactions")
def list_month_transactions(db: Session = Depends(get_db)):
    month_from, month_to = month_range(month_start(today()))
    return _list(db, SH.service_date_time >= month_from, SH.service_date_time < month_to)


@router.get("/hairdresser/{hairdresser_id}", response_model=list[TransactionOut])
def list_hairdresser_transactions(
    hairdresser_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    db: Session = Depends(get_db),
):
    conditions = [SH.hairdresser_id == hairdresser_id]
    if start_date and end_date:
        conditions.extend(_between_days(start_date, end_date))
    return _list(db, *conditions)


@router.get("/{transaction_id}", response_model=TransactionOut, responses=error_responses(404, 500))
def get_transaction(transaction_id: str, db: Session = Depends(get_db)):
    return transaction_out(_transaction_or_404(db, transaction_id))


@router.post(
    "",
    response_model=TransactionOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record a service",
    responses=error_responses(400, 409, 500),
)
def create_transaction(payload: TransactionCreate, db: Session = Depends(get_db)):
    row = SH(
        service_date_time=payload.service_date_time or now_local(),
        salon_id=payload.salon_id,
        hairdresser_id=payload.hairdresser_id,
        service_id=payload.service_id or None,
        service_name=payload.service_name or "",
        price_salon=to_money(payload.price_salon),
        price_coiffeur=to_money(payload.price_coiffeur),
        payment_method=payload.payment_method,
    )
    db.add(row)
    commit_or_conflict(db, detail=UNKNOWN_REFERENCE)
    db.refresh(row)
    return transaction_out(row)


@router.put("/{transaction_id}", response_model=TransactionOut, responses=error_responses(400, 404, 409, 500))
def update_transaction(transaction_id: str, payload: TransactionUpdate, db: Session = Depends(get_db)):
    row = _transaction_or_404(db, transaction_id)
    fields = payload.model_fields_set

    for name in ("service_date_time", "salon_id", "hairdresser_id"):
        if name in fields and getattr(payload, name) is not None:
            setattr(row, name, getattr(payload, name))
    if "service_id" in fields:
        row.service_id = payload.service_id or None
    if "service_name" in fields:
        row.service_name = payload.service_name or ""
    for name in ("price_salon", "price_coiffeur"):
        if name in fields and getattr(payload, name) is not None:
            setattr(row, name, to_money(getattr(payload, name)))
    if "payment_method" in fields and payload.payment_method:
        row.payment_method = payload.payment_method.strip().lower()

    commit_or_conflict(db, detail=UNKNOWN_REFERENCE)
    db.refresh(row)
    return transaction_out(row)


@router.delete("/{transaction_id}", response_model=TransactionDeleteOut, responses=error_responses(404, 500))
def delete_transaction(transaction_id: str, db: Session = Depends(get_db)):
    row = _transaction_or_404(db, transaction_id)
    deleted = transaction_out(row)
    db.delete(row)
    db.commit()
    return TransactionDeleteOut(message="Transaction supprimée", transaction=deleted)
