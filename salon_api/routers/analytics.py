from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.deps import get_db, parse_month_or_400
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.salon import Salon
from salon_api.models.service_history import ServiceHistory
from salon_api.routers.transactions import transaction_out
from salon_api.schemas.analytics import (
    DailyRevenuePointOut,
    DashboardOut,
    HairdresserStatsOut,
    MonthlyCostsOut,
    PaymentMethodStatOut,
    PayrollLineOut,
    SalonRevenueOut,
    ServiceBreakdownOut,
    TopHairdresserOut,
)
from salon_api.schemas.transaction import TransactionOut
from salon_api.services import analytics_service

router = APIRouter(prefix="/analytics", tags=["analytics"])

Period = Literal["week", "month", "year", "all"]


@router.get("/dashboard", response_model=DashboardOut, summary="Headline KPIs")
def get_dashboard(db: Session = Depends(get_db)):
    return analytics_service.get_dashboard(db)


@router.get(
    "/daily-revenue",
    response_model=list[DailyRevenuePointOut],
    summary="Revenue per day",
    description="One point per day ending today; days without services are zero.",
)
def get_daily_revenue(days: int = Query(default=7, ge=1, le=366), db: Session = Depends(get_db)):
    return analytics_service.get_daily_revenue(db, days=days)


@router.get("/revenue-by-salon", response_model=list[SalonRevenueOut])
def get_revenue_by_salon(period: Period = "month", db: Session = Depends(get_db)):
    return analytics_service.get_revenue_by_salon(db, period=period)


@router.get("/top-hairdressers", response_model=list[TopHairdresserOut])
def get_top_hairdressers(
    limit: int = Query(default=5, ge=1, le=100),
    period: Period = "month",
    db: Session = Depends(get_db),
):
    return analytics_service.get_top_hairdressers(db, limit=limit, period=period)


@router.get("/service-breakdown", response_model=list[ServiceBreakdownOut])
def get_service_breakdown(period: Period = "month", db: Session = Depends(get_db)):
    return analytics_service.get_service_breakdown(db, period=period)


@router.get(
    "/payment-methods",
    response_model=dict[str, PaymentMethodStatOut],
    description="`cash` and `card` are always present.",
)
def get_payment_methods(period: Period = "month", db: Session = Depends(get_db)):
    return analytics_service.get_payment_method_stats(db, period=period)


@router.get("/recent-transactions", response_model=list[TransactionOut])
def get_recent_transactions(limit: int = Query(default=5, ge=1, le=100), db: Session = Depends(get_db)):
    rows = db.execute(
        select(ServiceHistory, Hairdresser.first_name, Hairdresser.last_name, Salon.name)
        .outerjoin(Hairdresser, Hairdresser.id == ServiceHistory.hairdresser_id)
        .outerjoin(Salon, Salon.id == ServiceHistory.salon_id)
        .order_by(ServiceHistory.service_date_time.desc())
        .limit(limit)
    ).all()
    return [transaction_out(*row) for row in rows]


@router.get(
    "/payroll",
    response_model=list[PayrollLineOut],
    summary="Monthly earnings per active hairdresser",
    description="Service share for the month plus fixed salaries of assignments still running.",
    responses=error_responses(400, 500),
)
def get_payroll(
    month: Optional[str] = None,
    salon_id: Optional[str] = None,
    db: Session = Depends(get_db),
):
    first_day = parse_month_or_400(month) if month else None
    return analytics_service.get_payroll(db, first_day, salon_id=salon_id)


@router.get("/hairdresser/{hairdresser_id}", response_model=HairdresserStatsOut, summary="Personal stats of a hairdresser")
def get_hairdresser_stats(hairdresser_id: str, db: Session = Depends(get_db)):
    stats = analytics_service.get_hairdresser_stats(db, hairdresser_id)
    stats["recentTransactions"] = [
        transaction_out(row, salon_name=salon_name) for row, salon_name in stats["recentTransactions"]
    ]
    return stats


@router.get(
    "/fixed-costs/{month}",
    response_model=MonthlyCostsOut,
    summary="Fixed and variable costs of a month",
    description="Fixed costs are the amounts in force on the first day of the month.",
    responses=error_responses(400, 500),
)
def get_monthly_costs(month: str, salon_id: Optional[str] = None, db: Session = Depends(get_db)):
    return analytics_service.get_monthly_costs(db, parse_month_or_400(month), salon_id=salon_id)
