from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.money import money_float, to_money
from salon_api.models.service import Service
from salon_api.schemas.service import ServiceCreate, ServiceDeleteOut, ServiceOut, ServiceUpdate

router = APIRouter(prefix="/services", tags=["services"])

SERVICE_NOT_FOUND = "Service non trouvé"


def _service_out(service: Service) -> ServiceOut:
    return ServiceOut(
        id=service.id,
        name=service.name,
        price_salon=money_float(service.price_salon),
        price_coiffeur=money_float(service.price_coiffeur),
        duration_minutes=service.duration_minutes,
        is_active=service.is_active,
        created_at=service.created_at,
    )


def _service_or_404(db: Session, service_id: str) -> Service:
    service = db.get(Service, service_id)
    if not service:
        raise HTTPException(status_code=404, detail=SERVICE_NOT_FOUND)
    return service


@router.get("", response_model=list[ServiceOut], summary="List services")
def list_services(db: Session = Depends(get_db)):
    return [_service_out(s) for s in db.execute(select(Service).order_by(Service.name)).scalars()]


@router.get("/active", response_model=list[ServiceOut], summary="List active services")
def list_active_services(db: Session = Depends(get_db)):
    rows = db.execute(select(Service).where(Service.is_active.is_(True)).order_by(Service.name)).scalars()
    return [_service_out(s) for s in rows]


@router.get("/{service_id}", response_model=ServiceOut, summary="Get service", responses=error_responses(404, 500))
def get_service(service_id: str, db: Session = Depends(get_db)):
    return _service_out(_service_or_404(db, service_id))


@router.post(
    "",
    response_model=ServiceOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create service",
    responses=error_responses(400, 500),
)
def create_service(payload: ServiceCreate, db: Session = Depends(get_db)):
    service = Service(
        name=payload.name,
        price_salon=to_money(payload.price_salon),
        price_coiffeur=to_money(payload.price_coiffeur),
        duration_minutes=payload.duration_minutes,
        is_active=payload.is_active is not False,
    )
    db.add(service)
    commit_or_conflict(db)
    db.refresh(service)
    return _service_out(service)


@router.put("/{service_id}", response_model=ServiceOut, summary="Update service", responses=error_responses(400, 404, 500))
def update_service(service_id: str, payload: ServiceUpdate, db: Session = Depends(get_db)):
    service = _service_or_404(db, service_id)
    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for name in ("price_salon", "price_coiffeur"):
        if name in changes:
            changes[name] = to_money(changes[name])
    for name, value in changes.items():
        setattr(service, name, value)
    commit_or_conflict(db)
    db.refresh(service)
    return _service_out(service)


@router.delete("/{service_id}", response_model=ServiceDeleteOut, summary="Delete service", responses=error_responses(404, 500))
def delete_service(service_id: str, db: Session = Depends(get_db)):
    service = _service_or_404(db, service_id)
    deleted = _service_out(service)
    db.delete(service)
    commit_or_conflict(db)
    return ServiceDeleteOut(message="Service supprimé", service=deleted)
