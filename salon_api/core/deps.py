from collections.abc import Iterator
from datetime import date

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_api.core.dates import parse_month
from salon_api.db.session import SessionLocal


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def commit_or_conflict(db: Session, detail: str = "Conflit avec une donnée existante") -> None:
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=detail) from None


INVALID_MONTH = "Format de mois invalide (YYYY-MM)"


def parse_month_or_400(value: str) -> date:
    try:
        return parse_month(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=INVALID_MONTH) from None
