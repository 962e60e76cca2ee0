from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.dates import month_range, today
from salon_api.core.deps import commit_or_conflict, get_db
from salon_api.core.money import money_float, to_money
from salon_api.core.observability import log_event
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.payroll import SalaryCost
from salon_api.models.service_history import ServiceHistory
from salon_api.schemas.payroll import (
    SalaryCostOut,
    SalaryCostUpdate,
    SalaryDeleteMonthOut,
    SalaryImportIn,
    SalaryImportOut,
    SalaryMonthOut,
    SalarySummaryOut,
    SuccessMessageOut,
)
from salon_api.services import payroll_service

router = APIRouter(prefix="/salary-costs", tags=["salary-costs"])

SALARY_COST_NOT_FOUND = "Coût salaire non trouvé"
_AMOUNT_FIELDS = ("net_salary", "gross_salary", "total_cost", "charges")


def _salary_cost_out(row: SalaryCost, **extra) -> SalaryCostOut:
    return SalaryCostOut(
        id=row.id,
        hairdresser_id=row.hairdresser_id,
        last_name=row.last_name,
        first_name=row.first_name,
        net_salary=money_float(row.net_salary),
        gross_salary=money_float(row.gross_salary),
        total_cost=money_float(row.total_cost),
        charges=money_float(row.charges),
        month=row.month,
        year=row.year,
        created_at=row.created_at,
        updated_at=row.updated_at,
        **extra,
    )


def _with_names_or_404(db: Session, salary_cost_id: str) -> SalaryCostOut:
    row = db.execute(
        select(SalaryCost, Hairdresser.first_name, Hairdresser.last_name)
        .outerjoin(Hairdresser, Hairdresser.id == SalaryCost.hairdresser_id)
        .where(SalaryCost.id == salary_cost_id)
    ).first()
    if not row:
        raise HTTPException(status_code=404, detail=SALARY_COST_NOT_FOUND)
    salary_cost, h_first_name, h_last_name = row
    return _salary_cost_out(salary_cost, h_first_name=h_first_name, h_last_name=h_last_name)


@router.get(
    "",
    response_model=list[SalaryCostOut],
    summary="Salary lines of a month",
    description="Each line carries the revenue its hairdresser generated that month (hairdresser share).",
)
def list_salary_costs(
    month: Optional[int] = Query(default=None, ge=1, le=12),
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db),
):
    current = today()
    month = month or current.month
    year = year or current.year
    month_from, month_to = month_range(date(year, month, 1))

    revenue = (
        select(
            ServiceHistory.hairdresser_id.label("hairdresser_id"),
            func.sum(ServiceHistory.price_coiffeur).label("total_revenue"),
            func.count(ServiceHistory.id).label("service_count"),
        )
        .where(
            ServiceHistory.service_date_time >= month_from,
            ServiceHistory.service_date_time < month_to,
        )
        .group_by(ServiceHistory.hairdresser_id)
        .subquery()
    )
    rows = db.execute(
        select(
            SalaryCost,
            Hairdresser.first_name,
            Hairdresser.last_name,
            Hairdresser.matricule,
            Hairdresser.tax_percentage,
            func.coalesce(revenue.c.total_revenue, 0),
            func.coalesce(revenue.c.service_count, 0),
        )
        .outerjoin(Hairdresser, Hairdresser.id == SalaryCost.hairdresser_id)
        .outerjoin(revenue, revenue.c.hairdresser_id == SalaryCost.hairdresser_id)
        .where(SalaryCost.month == month, SalaryCost.year == year)
        .order_by(SalaryCost.last_name)
    ).all()
    return [
        _salary_cost_out(
            salary_cost,
            h_first_name=h_first_name,
            h_last_name=h_last_name,
            matricule=matricule,
            tax_percentage=money_float(tax_percentage) if tax_percentage is not None else None,
            generated_revenue=money_float(total_revenue),
            service_count=int(service_count),
        )
        for salary_cost, h_first_name, h_last_name, matricule, tax_percentage, total_revenue, service_count in rows
    ]


@router.get("/months", response_model=list[SalaryMonthOut], summary="Months with imported salary lines")
def list_salary_months(db: Session = Depends(get_db)):
    rows = db.execute(
        select(SalaryCost.year, SalaryCost.month)
        .distinct()
        .order_by(SalaryCost.year.desc(), SalaryCost.month.desc())
    ).all()
    return [SalaryMonthOut(year=year, month=month) for year, month in rows]


@router.get("/summary", response_model=SalarySummaryOut, responses=error_responses(400, 500))
def get_salary_summary(
    month: Optional[int] = None,
    year: Optional[int] = Query(default=None, ge=2000, le=2100),
    db: Session = Depends(get_db),
):
    if not month or not year:
        raise HTTPException(status_code=400, detail="Month and year are required")
    count, total_net, total_gross, total_cost, total_charges = db.execute(
        select(
            func.count(SalaryCost.id),
            func.sum(SalaryCost.net_salary),
            func.sum(SalaryCost.gross_salary),
            func.sum(SalaryCost.total_cost),
            func.sum(SalaryCost.charges),
        ).where(SalaryCost.month == month, SalaryCost.year == year)
    ).one()
    return SalarySummaryOut(
        total_employees=int(count),
        total_net=money_float(total_net),
        total_gross=money_float(total_gross),
        total_cost=money_float(total_cost),
        total_charges=money_float(total_charges),
    )


@router.post(
    "/import",
    response_model=SalaryImportOut,
    response_model_exclude_none=True,
    summary="Import a month of salary lines",
    description=(
        "Replaces every line of the month. Rows come from `data` or from `csv_content` "
        "(header row, `;` or `,` delimiter). Rows that fail are reported in `errors`."
    ),
    responses=error_responses(400, 500),
)
def import_salary_costs(payload: SalaryImportIn, db: Session = Depends(get_db)):
    if not payload.month or not payload.year or (payload.data is None and not payload.csv_content):
        raise HTTPException(status_code=400, detail="Month, year and data array are required")

    if payload.data is not None:
        rows = payload.data
    else:
        try:
            rows = payroll_service.parse_csv_rows(payload.csv_content, payload.delimiter)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from None

    try:
        result = payroll_service.import_salary_costs(db, month=payload.month, year=payload.year, rows=rows)
    except SQLAlchemyError:
        raise HTTPException(status_code=500, detail="Erreur lors de l'import") from None

    return SalaryImportOut(
        success=True,
        imported=result.imported,
        errors=result.errors or None,
        message=f"{result.imported} lignes importées avec succès",
    )


@router.delete("/month/{year}/{month}", response_model=SalaryDeleteMonthOut, summary="Delete a month of salary lines")
def delete_salary_month(year: int, month: int, db: Session = Depends(get_db)):
    result = db.execute(delete(SalaryCost).where(SalaryCost.year == year, SalaryCost.month == month))
    db.commit()
    deleted = result.rowcount or 0
    log_event("salary_costs.delete_month", year=year, month=month, deleted=deleted)
    return SalaryDeleteMonthOut(success=True, deleted=deleted, message=f"{deleted} lignes supprimées")


@router.get("/{salary_cost_id}", response_model=SalaryCostOut, responses=error_responses(404, 500))
def get_salary_cost(salary_cost_id: str, db: Session = Depends(get_db)):
    return _with_names_or_404(db, salary_cost_id)


@router.put("/{salary_cost_id}", response_model=SalaryCostOut, responses=error_responses(400, 404, 409, 500))
def update_salary_cost(salary_cost_id: str, payload: SalaryCostUpdate, db: Session = Depends(get_db)):
    salary_cost = db.get(SalaryCost, salary_cost_id)
    if not salary_cost:
        raise HTTPException(status_code=404, detail=SALARY_COST_NOT_FOUND)

    fields = payload.model_fields_set
    for name in _AMOUNT_FIELDS:
        if name in fields and getattr(payload, name) is not None:
            setattr(salary_cost, name, to_money(getattr(payload, name)))
    if "hairdresser_id" in fields:
        salary_cost.hairdresser_id = payload.hairdresser_id or None
    salary_cost.updated_at = func.now()

    commit_or_conflict(db, detail="Coiffeur inconnu")
    return _with_names_or_404(db, salary_cost_id)


@router.delete("/{salary_cost_id}", response_model=SuccessMessageOut, responses=error_responses(404, 500))
def delete_salary_cost(salary_cost_id: str, db: Session = Depends(get_db)):
    salary_cost = db.get(SalaryCost, salary_cost_id)
    if not salary_cost:
        raise HTTPException(status_code=404, detail=SALARY_COST_NOT_FOUND)
    db.delete(salary_cost)
    db.commit()
    return SuccessMessageOut(success=True, message="Supprimé avec succès")
