from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import today
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.money import money_float, to_money
from salon_api.models.assignment import Assignment
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.salon import Salon
from salon_api.schemas.assignment import (
    AssignmentCreate,
    AssignmentDeleteOut,
    AssignmentOut,
    AssignmentUpdate,
)

router = APIRouter(prefix="/assignments", tags=["assignments"])

ASSIGNMENT_NOT_FOUND = "Affectation non trouvée"
UNKNOWN_REFERENCE = "Coiffeur ou salon inconnu"


def _assignment_out(assignment: Assignment, first_name=None, last_name=None, salon_name=None) -> AssignmentOut:
    return AssignmentOut(
        id=assignment.id,
        hairdresser_id=assignment.hairdresser_id,
        salon_id=assignment.salon_id,
        start_date=assignment.start_date,
        end_date=assignment.end_date,
        compensation_type=assignment.compensation_type,
        commission_percentage=money_float(assignment.commission_percentage),
        tax_percentage=money_float(assignment.tax_percentage),
        fixed_salary=money_float(assignment.fixed_salary),
        created_at=assignment.created_at,
        first_name=first_name,
        last_name=last_name,
        salon_name=salon_name,
    )


def _joined_stmt():
    return (
        select(Assignment, Hairdresser.first_name, Hairdresser.last_name, Salon.name)
        .join(Hairdresser, Hairdresser.id == Assignment.hairdresser_id)
        .join(Salon, Salon.id == Assignment.salon_id)
        .order_by(Assignment.start_date.desc())
    )


def _joined_out(rows) -> list[AssignmentOut]:
    return [
        _assignment_out(assignment, first_name, last_name, salon_name)
        for assignment, first_name, last_name, salon_name in rows
    ]


def _assignment_or_404(db: Session, assignment_id: str) -> Assignment:
    assignment = db.get(Assignment, assignment_id)
    if not assignment:
        raise HTTPException(status_code=404, detail=ASSIGNMENT_NOT_FOUND)
    return assignment


@router.get("", response_model=list[AssignmentOut], summary="List assignments")
def list_assignments(db: Session = Depends(get_db)):
    return _joined_out(db.execute(_joined_stmt()).all())


@router.get("/active", response_model=list[AssignmentOut], summary="Assignments without end date or ending today or later")
def list_active_assignments(db: Session = Depends(get_db)):
    stmt = _joined_stmt().where(or_(Assignment.end_date.is_(None), Assignment.end_date >= today()))
    return _joined_out(db.execute(stmt).all())


@router.get("/hairdresser/{hairdresser_id}", response_model=list[AssignmentOut])
def list_hairdresser_assignments(hairdresser_id: str, db: Session = Depends(get_db)):
    stmt = _joined_stmt().where(Assignment.hairdresser_id == hairdresser_id)
    return _joined_out(db.execute(stmt).all())


@router.get("/salon/{salon_id}", response_model=list[AssignmentOut])
def list_salon_assignments(salon_id: str, db: Session = Depends(get_db)):
    stmt = _joined_stmt().where(Assignment.salon_id == salon_id)
    return _joined_out(db.execute(stmt).all())


@router.get("/{assignment_id}", response_model=AssignmentOut, responses=error_responses(404, 500))
def get_assignment(assignment_id: str, db: Session = Depends(get_db)):
    return _assignment_out(_assignment_or_404(db, assignment_id))


@router.post(
    "",
    response_model=AssignmentOut,
    status_code=status.HTTP_201_CREATED,
    responses=error_responses(400, 409, 500),
)
def create_assignment(payload: AssignmentCreate, db: Session = Depends(get_db)):
    assignment = Assignment(
        hairdresser_id=payload.hairdresser_id,
        salon_id=payload.salon_id,
        start_date=payload.start_date,
        end_date=payload.end_date,
        compensation_type=payload.compensation_type,
        commission_percentage=to_money(payload.commission_percentage),
        tax_percentage=to_money(payload.tax_percentage),
        fixed_salary=to_money(payload.fixed_salary),
    )
    db.add(assignment)
    commit_or_conflict(db, detail=UNKNOWN_REFERENCE)
    db.refresh(assignment)
    return _assignment_out(assignment)


@router.put("/{assignment_id}", response_model=AssignmentOut, responses=error_responses(400, 404, 409, 500))
def update_assignment(assignment_id: str, payload: AssignmentUpdate, db: Session = Depends(get_db)):
    assignment = _assignment_or_404(db, assignment_id)
    fields = payload.model_fields_set

    for name in ("hairdresser_id", "salon_id", "start_date", "compensation_type"):
        if name in fields and getattr(payload, name) is not None:
            setattr(assignment, name, getattr(payload, name))
    if "end_date" in fields:
        assignment.end_date = payload.end_date
    for name in ("commission_percentage", "tax_percentage", "fixed_salary"):
        if name in fields and getattr(payload, name) is not None:
            setattr(assignment, name, to_money(getattr(payload, name)))

    if assignment.end_date and assignment.end_date < assignment.start_date:
        db.rollback()
        raise HTTPException(status_code=400, detail="La date de fin précède la date de début")

    commit_or_conflict(db, detail=UNKNOWN_REFERENCE)
    db.refresh(assignment)
    return _assignment_out(assignment)


@router.delete("/{assignment_id}", response_model=AssignmentDeleteOut, responses=error_responses(404, 500))
def delete_assignment(assignment_id: str, db: Session = Depends(get_db)):
    assignment = _assignment_or_404(db, assignment_id)
    deleted = _assignment_out(assignment)
    db.delete(assignment)
    db.commit()
    return AssignmentDeleteOut(message="Affectation supprimée", assignment=deleted)
