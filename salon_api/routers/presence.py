import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import today
from salon_api.core.deps import get_db
from salon_api.core.observability import log_event
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.presence import Presence
from salon_api.models.salon import Salon
from salon_api.schemas.presence import (
    PresenceCheckOut,
    PresenceDeleteOut,
    PresenceIn,
    PresenceOut,
    PresenceToggleIn,
    PresenceToggleOut,
)

router = APIRouter(prefix="/presence", tags=["presence"])

PRESENCE_EXISTS = "Présence déjà enregistrée"


def _presence_out(presence: Presence, first_name=None, last_name=None, salon_name=None) -> PresenceOut:
    return PresenceOut(
        id=presence.id,
        hairdresser_id=presence.hairdresser_id,
        salon_id=presence.salon_id,
        date=presence.date,
        created_at=presence.created_at,
        first_name=first_name,
        last_name=last_name,
        salon_name=salon_name,
    )


def _joined_stmt():
    return (
        select(Presence, Hairdresser.first_name, Hairdresser.last_name, Salon.name)
        .join(Hairdresser, Hairdresser.id == Presence.hairdresser_id)
        .join(Salon, Salon.id == Presence.salon_id)
    )


def _find(db: Session, hairdresser_id: str, salon_id: str, day: datetime.date) -> Presence | None:
    return db.execute(
        select(Presence).where(
            Presence.hairdresser_id == hairdresser_id,
            Presence.salon_id == salon_id,
            Presence.date == day,
        )
    ).scalar_one_or_none()


def _insert(db: Session, hairdresser_id: str, salon_id: str, day: datetime.date) -> Presence:
    presence = Presence(hairdresser_id=hairdresser_id, salon_id=salon_id, date=day)
    db.add(presence)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # The triple is unique; a concurrent insert or an unknown id lands here.
        if _find(db, hairdresser_id, salon_id, day):
            raise HTTPException(status_code=409, detail=PRESENCE_EXISTS) from None
        raise HTTPException(status_code=409, detail="Coiffeur ou salon inconnu") from None
    db.refresh(presence)
    return presence


@router.get("", response_model=list[PresenceOut], summary="List presence records")
def list_presence(
    salon_id: Optional[str] = None,
    date: Optional[datetime.date] = None,
    db: Session = Depends(get_db),
):
    stmt = _joined_stmt()
    if salon_id:
        stmt = stmt.where(Presence.salon_id == salon_id)
    if date:
        stmt = stmt.where(Presence.date == date)
    rows = db.execute(stmt.order_by(Presence.date.desc(), Hairdresser.first_name)).all()
    return [_presence_out(*row) for row in rows]


@router.get("/today", response_model=list[PresenceOut], summary="Today's presence")
def list_today_presence(db: Session = Depends(get_db)):
    rows = db.execute(
        _joined_stmt().where(Presence.date == today()).order_by(Salon.name, Hairdresser.first_name)
    ).all()
    return [_presence_out(*row) for row in rows]


@router.get("/check", response_model=PresenceCheckOut, summary="Is a hairdresser present on a date")
def check_presence(
    hairdresser_id: str,
    salon_id: str,
    date: datetime.date,
    db: Session = Depends(get_db),
):
    presence = _find(db, hairdresser_id, salon_id, date)
    return PresenceCheckOut(
        isPresent=presence is not None,
        record=_presence_out(presence) if presence else None,
    )


@router.post(
    "/toggle",
    response_model=PresenceToggleOut,
    response_model_exclude_none=True,
    summary="Toggle presence",
    description="Removes the record when present, creates it otherwise.",
    responses=error_responses(400, 409, 500),
)
def toggle_presence(payload: PresenceToggleIn, db: Session = Depends(get_db)):
    existing = _find(db, payload.hairdresser_id, payload.salon_id, payload.date)
    if existing:
        db.delete(existing)
        db.commit()
        log_event(
            "presence.toggle",
            action="removed",
            hairdresser_id=payload.hairdresser_id,
            salon_id=payload.salon_id,
            date=payload.date.isoformat(),
        )
        return PresenceToggleOut(action="removed", isPresent=False)

    presence = _insert(db, payload.hairdresser_id, payload.salon_id, payload.date)
    log_event(
        "presence.toggle",
        action="added",
        hairdresser_id=payload.hairdresser_id,
        salon_id=payload.salon_id,
        date=payload.date.isoformat(),
    )
    return PresenceToggleOut(action="added", isPresent=True, record=_presence_out(presence))


@router.post(
    "",
    response_model=PresenceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record presence",
    responses=error_responses(400, 409, 500),
)
def create_presence(payload: PresenceIn, db: Session = Depends(get_db)):
    day = payload.date or today()
    if _find(db, payload.hairdresser_id, payload.salon_id, day):
        raise HTTPException(status_code=409, detail=PRESENCE_EXISTS)
    return _presence_out(_insert(db, payload.hairdresser_id, payload.salon_id, day))


@router.delete("/{presence_id}", response_model=PresenceDeleteOut, responses=error_responses(404, 500))
def delete_presence(presence_id: str, db: Session = Depends(get_db)):
    presence = db.get(Presence, presence_id)
    if not presence:
        raise HTTPException(status_code=404, detail="Présence non trouvée")
    deleted = _presence_out(presence)
    db.delete(presence)
    db.commit()
    return PresenceDeleteOut(message="Présence supprimée", presence=deleted)
