from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.models.salon import Salon
from salon_api.schemas.salon import SalonCreate, SalonDeleteOut, SalonOut, SalonUpdate

router = APIRouter(prefix="/salons", tags=["salons"])

SALON_NOT_FOUND = "Salon non trouvé"


def _salon_out(salon: Salon) -> SalonOut:
    return SalonOut(
        id=salon.id,
        name=salon.name,
        address=salon.address,
        city=salon.city,
        phone=salon.phone,
        email=salon.email,
        is_active=salon.is_active,
        created_at=salon.created_at,
    )


def _salon_or_404(db: Session, salon_id: str) -> Salon:
    salon = db.get(Salon, salon_id)
    if not salon:
        raise HTTPException(status_code=404, detail=SALON_NOT_FOUND)
    return salon


@router.get("", response_model=list[SalonOut], summary="List salons", responses=error_responses(500))
def list_salons(db: Session = Depends(get_db)):
    rows = db.execute(select(Salon).order_by(Salon.created_at.desc())).scalars()
    return [_salon_out(salon) for salon in rows]


@router.get("/active", response_model=list[SalonOut], summary="List active salons")
def list_active_salons(db: Session = Depends(get_db)):
    rows = db.execute(select(Salon).where(Salon.is_active.is_(True)).order_by(Salon.name)).scalars()
    return [_salon_out(salon) for salon in rows]


@router.get("/{salon_id}", response_model=SalonOut, summary="Get salon", responses=error_responses(404, 500))
def get_salon(salon_id: str, db: Session = Depends(get_db)):
    return _salon_out(_salon_or_404(db, salon_id))


@router.post(
    "",
    response_model=SalonOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create salon",
    responses=error_responses(400, 409, 500),
)
def create_salon(payload: SalonCreate, db: Session = Depends(get_db)):
    salon = Salon(
        name=payload.name,
        address=payload.address or "",
        city=payload.city or "",
        phone=payload.phone or "",
        email=payload.email or "",
        is_active=payload.is_active is not False,
    )
    db.add(salon)
    commit_or_conflict(db)
    db.refresh(salon)
    return _salon_out(salon)


@router.put("/{salon_id}", response_model=SalonOut, summary="Update salon", responses=error_responses(400, 404, 409, 500))
def update_salon(salon_id: str, payload: SalonUpdate, db: Session = Depends(get_db)):
    salon = _salon_or_404(db, salon_id)
    for field in ("name", "address", "city", "phone", "email", "is_active"):
        if field not in payload.model_fields_set:
            continue
        value = getattr(payload, field)
        if value is None and field in ("name", "is_active"):
            continue
        setattr(salon, field, value if value is not None else "")
    commit_or_conflict(db)
    db.refresh(salon)
    return _salon_out(salon)


@router.delete("/{salon_id}", response_model=SalonDeleteOut, summary="Delete salon", responses=error_responses(404, 409, 500))
def delete_salon(salon_id: str, db: Session = Depends(get_db)):
    salon = _salon_or_404(db, salon_id)
    deleted = _salon_out(salon)
    db.delete(salon)
    commit_or_conflict(db, detail="Salon encore référencé")
    return SalonDeleteOut(message="Salon supprimé", salon=deleted)
