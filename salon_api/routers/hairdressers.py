from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.id_utils import generate_shortuuid
from salon_api.core.money import money_float, to_money
from salon_api.core.security import hash_password
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.user import User
from salon_api.schemas.hairdresser import (
    HairdresserCreate,
    HairdresserDeleteOut,
    HairdresserOut,
    HairdresserUpdate,
)

router = APIRouter(prefix="/hairdressers", tags=["hairdressers"])

HAIRDRESSER_NOT_FOUND = "Coiffeur non trouvé"
_TEXT_FIELDS = ("email", "phone", "rib_1", "rib_2")


def _hairdresser_out(hairdresser: Hairdresser) -> HairdresserOut:
    return HairdresserOut(
        id=hairdresser.id,
        matricule=hairdresser.matricule,
        first_name=hairdresser.first_name,
        last_name=hairdresser.last_name,
        email=hairdresser.email,
        phone=hairdresser.phone,
        rib_1=hairdresser.rib_1,
        rib_2=hairdresser.rib_2,
        tax_percentage=money_float(hairdresser.tax_percentage),
        is_active=hairdresser.is_active,
        created_at=hairdresser.created_at,
    )


def _hairdresser_or_404(db: Session, hairdresser_id: str) -> Hairdresser:
    hairdresser = db.get(Hairdresser, hairdresser_id)
    if not hairdresser:
        raise HTTPException(status_code=404, detail=HAIRDRESSER_NOT_FOUND)
    return hairdresser


def _full_name(hairdresser: Hairdresser) -> str:
    return f"{hairdresser.first_name} {hairdresser.last_name}"


def _create_login(db: Session, hairdresser: Hairdresser) -> None:
    # Login is the email, credential the phone number. An existing username is kept as is.
    taken = db.execute(
        select(User.id).where(func.lower(User.username) == hairdresser.email.lower())
    ).first()
    if taken:
        return
    db.add(
        User(
            username=hairdresser.email,
            password_hash=hash_password(hairdresser.phone),
            role="coiffeur",
            name=_full_name(hairdresser),
            email=hairdresser.email,
            hairdresser_id=hairdresser.id,
        )
    )


def _sync_login(db: Session, hairdresser: Hairdresser) -> None:
    users = db.execute(select(User).where(User.hairdresser_id == hairdresser.id)).scalars()
    for user in users:
        user.username = hairdresser.email
        user.password_hash = hash_password(hairdresser.phone)
        user.name = _full_name(hairdresser)
        user.email = hairdresser.email


@router.get("", response_model=list[HairdresserOut], summary="List hairdressers")
def list_hairdressers(db: Session = Depends(get_db)):
    rows = db.execute(
        select(Hairdresser).order_by(Hairdresser.first_name, Hairdresser.last_name)
    ).scalars()
    return [_hairdresser_out(row) for row in rows]


@router.get("/active", response_model=list[HairdresserOut], summary="List active hairdressers")
def list_active_hairdressers(db: Session = Depends(get_db)):
    rows = db.execute(
        select(Hairdresser)
        .where(Hairdresser.is_active.is_(True))
        .order_by(Hairdresser.first_name, Hairdresser.last_name)
    ).scalars()
    return [_hairdresser_out(row) for row in rows]


@router.get(
    "/{hairdresser_id}",
    response_model=HairdresserOut,
    summary="Get hairdresser",
    responses=error_responses(404, 500),
)
def get_hairdresser(hairdresser_id: str, db: Session = Depends(get_db)):
    return _hairdresser_out(_hairdresser_or_404(db, hairdresser_id))


@router.post(
    "",
    response_model=HairdresserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create hairdresser",
    description="Also creates a `coiffeur` login (email / phone) when both are provided.",
    responses=error_responses(400, 409, 500),
)
def create_hairdresser(payload: HairdresserCreate, db: Session = Depends(get_db)):
    hairdresser = Hairdresser(
        id=generate_shortuuid(),
        matricule=payload.matricule,
        first_name=payload.first_name,
        last_name=payload.last_name,
        email=payload.email or "",
        phone=payload.phone or "",
        rib_1=payload.rib_1 or "",
        rib_2=payload.rib_2 or "",
        tax_percentage=to_money(payload.tax_percentage),
        is_active=payload.is_active is not False,
    )
    db.add(hairdresser)
    if hairdresser.email and hairdresser.phone:
        _create_login(db, hairdresser)
    commit_or_conflict(db, detail="Matricule déjà utilisé")
    db.refresh(hairdresser)
    return _hairdresser_out(hairdresser)


@router.put(
    "/{hairdresser_id}",
    response_model=HairdresserOut,
    summary="Update hairdresser",
    responses=error_responses(400, 404, 409, 500),
)
def update_hairdresser(hairdresser_id: str, payload: HairdresserUpdate, db: Session = Depends(get_db)):
    hairdresser = _hairdresser_or_404(db, hairdresser_id)
    fields = payload.model_fields_set

    if "matricule" in fields:
        hairdresser.matricule = payload.matricule
    for name in ("first_name", "last_name"):
        if name in fields and getattr(payload, name) is not None:
            setattr(hairdresser, name, getattr(payload, name))
    for name in _TEXT_FIELDS:
        if name in fields:
            setattr(hairdresser, name, getattr(payload, name) or "")
    if "tax_percentage" in fields and payload.tax_percentage is not None:
        hairdresser.tax_percentage = to_money(payload.tax_percentage)
    if "is_active" in fields and payload.is_active is not None:
        hairdresser.is_active = payload.is_active

    if payload.email and payload.phone:
        _sync_login(db, hairdresser)
    commit_or_conflict(db)
    db.refresh(hairdresser)
    return _hairdresser_out(hairdresser)


@router.delete(
    "/{hairdresser_id}",
    response_model=HairdresserDeleteOut,
    summary="Delete hairdresser",
    description="Removes the linked login first.",
    responses=error_responses(404, 409, 500),
)
def delete_hairdresser(hairdresser_id: str, db: Session = Depends(get_db)):
    hairdresser = _hairdresser_or_404(db, hairdresser_id)
    deleted = _hairdresser_out(hairdresser)
    db.execute(delete(User).where(User.hairdresser_id == hairdresser.id))
    db.delete(hairdresser)
    commit_or_conflict(db, detail="Coiffeur encore référencé")
    return HairdresserDeleteOut(message="Coiffeur supprimé", hairdresser=deleted)
