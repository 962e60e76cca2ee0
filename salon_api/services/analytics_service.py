from datetime import date, timedelta

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from salon_api.core.dates import (
    date_key,
    day_start,
    french_day_label,
    month_range,
    month_start,
    period_start,
    today,
    week_start,
)
from salon_api.core.money import money_float
from salon_api.models.assignment import Assignment
from salon_api.models.expense import Expense
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.salon import Salon
from salon_api.models.service_history import ServiceHistory
from salon_api.services.fixed_expense_service import get_total_for_date

SH = ServiceHistory
DEFAULT_PAYMENT_METHODS = ("cash", "card")


def _revenue_and_count(db: Session, *conditions, amount_column=SH.price_salon) -> tuple[float, int]:
    total, count = db.execute(
        select(func.coalesce(func.sum(amount_column), 0), func.count(SH.id)).where(*conditions)
    ).one()
    return money_float(total), int(count or 0)


def _since(start):
    return SH.service_date_time >= start


def _between(start, end):
    return and_(SH.service_date_time >= start, SH.service_date_time < end)


def get_dashboard(db: Session) -> dict:
    current = today()
    tomorrow = day_start(current + timedelta(days=1))
    week_from = day_start(week_start(current))
    month_from, month_to = month_range(month_start(current))

    today_revenue, today_services = _revenue_and_count(db, _between(day_start(current), tomorrow))
    week_revenue, _ = _revenue_and_count(db, _between(week_from, week_from + timedelta(days=7)))
    month_revenue, _ = _revenue_and_count(db, _between(month_from, month_to))

    active_salons = db.execute(
        select(func.count(Salon.id)).where(Salon.is_active.is_(True))
    ).scalar_one()
    active_hairdressers = db.execute(
        select(func.count(Hairdresser.id)).where(Hairdresser.is_active.is_(True))
    ).scalar_one()

    return {
        "todayRevenue": today_revenue,
        "todayServices": today_services,
        "weekRevenue": week_revenue,
        "monthRevenue": month_revenue,
        "activeSalons": int(active_salons),
        "activeHairdressers": int(active_hairdressers),
    }


def _daily_totals(db: Session, amount_column, first_day: date, *conditions) -> dict[str, tuple[float, int]]:
    day = func.date(SH.service_date_time)
    rows = db.execute(
        select(day, func.coalesce(func.sum(amount_column), 0), func.count(SH.id))
        .where(SH.service_date_time >= day_start(first_day), *conditions)
        .group_by(day)
    ).all()
    return {date_key(key): (money_float(total), int(count)) for key, total, count in rows}


def get_daily_revenue(db: Session, days: int = 7) -> list[dict]:
    """Revenue per day for the last ``days`` days, ending today, with empty days as zero."""
    current = today()
    first_day = current - timedelta(days=days - 1)
    totals = _daily_totals(db, SH.price_salon, first_day)

    series = []
    for offset in range(days):
        day = first_day + timedelta(days=offset)
        revenue, count = totals.get(day.isoformat(), (0.0, 0))
        series.append(
            {
                "date": day.isoformat(),
                "label": french_day_label(day),
                "revenue": revenue,
                "count": count,
            }
        )
    return series


def get_revenue_by_salon(db: Session, period: str | None = "month") -> list[dict]:
    join_on = SH.salon_id == Salon.id
    start = period_start(period)
    if start is not None:
        join_on = and_(join_on, _since(start))

    revenue = func.coalesce(func.sum(SH.price_salon), 0)
    rows = db.execute(
        select(Salon.id, Salon.name, revenue.label("revenue"), func.count(SH.id))
        .outerjoin(SH, join_on)
        .where(Salon.is_active.is_(True))
        .group_by(Salon.id, Salon.name)
        .order_by(revenue.desc())
    ).all()
    return [
        {"id": salon_id, "name": name, "revenue": money_float(total), "count": int(count)}
        for salon_id, name, total, count in rows
    ]


def get_top_hairdressers(db: Session, limit: int = 5, period: str | None = "month") -> list[dict]:
    join_on = SH.hairdresser_id == Hairdresser.id
    start = period_start(period)
    if start is not None:
        join_on = and_(join_on, _since(start))

    revenue = func.coalesce(func.sum(SH.price_salon), 0)
    rows = db.execute(
        select(
            Hairdresser.id,
            Hairdresser.first_name,
            Hairdresser.last_name,
            revenue.label("revenue"),
            func.count(SH.id),
        )
        .outerjoin(SH, join_on)
        .where(Hairdresser.is_active.is_(True))
        .group_by(Hairdresser.id, Hairdresser.first_name, Hairdresser.last_name)
        .having(func.count(SH.id) > 0)
        .order_by(revenue.desc())
        .limit(limit)
    ).all()
    return [
        {
            "id": hairdresser_id,
            "first_name": first_name,
            "last_name": last_name,
            "revenue": money_float(total),
            "count": int(count),
        }
        for hairdresser_id, first_name, last_name, total, count in rows
    ]


def get_service_breakdown(db: Session, period: str | None = "month") -> list[dict]:
    count = func.count(SH.id)
    stmt = select(SH.service_name, count.label("count"), func.coalesce(func.sum(SH.price_salon), 0))
    start = period_start(period)
    if start is not None:
        stmt = stmt.where(_since(start))
    rows = db.execute(stmt.group_by(SH.service_name).order_by(count.desc())).all()
    return [
        {"service_name": service_name, "count": int(total_count), "revenue": money_float(revenue)}
        for service_name, total_count, revenue in rows
    ]


def get_payment_method_stats(db: Session, period: str | None = "month") -> dict[str, dict]:
    stmt = select(SH.payment_method, func.count(SH.id), func.coalesce(func.sum(SH.price_salon), 0))
    start = period_start(period)
    if start is not None:
        stmt = stmt.where(_since(start))
    rows = db.execute(stmt.group_by(SH.payment_method)).all()

    stats = {method: {"count": 0, "total": 0.0} for method in DEFAULT_PAYMENT_METHODS}
    for method, count, total in rows:
        stats[method] = {"count": int(count), "total": money_float(total)}
    return stats


def get_payroll(db: Session, first_day: date | None = None, salon_id: str | None = None) -> list[dict]:
    """Per active hairdresser: service totals for the month plus fixed salaries of active contracts."""
    month_from, month_to = month_range(first_day or month_start(today()))
    join_on = and_(SH.hairdresser_id == Hairdresser.id, _between(month_from, month_to))
    if salon_id:
        join_on = and_(join_on, SH.salon_id == salon_id)

    total_coiffeur = func.coalesce(func.sum(SH.price_coiffeur), 0)
    rows = db.execute(
        select(
            Hairdresser.id,
            Hairdresser.first_name,
            Hairdresser.last_name,
            func.count(SH.id),
            func.coalesce(func.sum(SH.price_salon), 0),
            total_coiffeur.label("total_coiffeur"),
        )
        .outerjoin(SH, join_on)
        .where(Hairdresser.is_active.is_(True))
        .group_by(Hairdresser.id, Hairdresser.first_name, Hairdresser.last_name)
        .order_by(total_coiffeur.desc())
    ).all()

    fixed_stmt = (
        select(Assignment.hairdresser_id, func.coalesce(func.sum(Assignment.fixed_salary), 0))
        .where(or_(Assignment.end_date.is_(None), Assignment.end_date >= today()))
        .group_by(Assignment.hairdresser_id)
    )
    if salon_id:
        fixed_stmt = fixed_stmt.where(Assignment.salon_id == salon_id)
    fixed_salaries = {
        hairdresser_id: money_float(total) for hairdresser_id, total in db.execute(fixed_stmt).all()
    }

    payroll = []
    for hairdresser_id, first_name, last_name, count, salon_total, coiffeur_total in rows:
        fixed_salary = fixed_salaries.get(hairdresser_id, 0.0)
        coiffeur = money_float(coiffeur_total)
        payroll.append(
            {
                "hairdresser": {"id": hairdresser_id, "first_name": first_name, "last_name": last_name},
                "transactionCount": int(count),
                "totalSalon": money_float(salon_total),
                "totalCoiffeur": coiffeur,
                "fixedSalary": fixed_salary,
                "totalEarnings": money_float(coiffeur + fixed_salary),
            }
        )
    return payroll


def get_hairdresser_stats(db: Session, hairdresser_id: str) -> dict:
    current = today()
    mine = SH.hairdresser_id == hairdresser_id
    tomorrow = day_start(current + timedelta(days=1))

    today_earnings, today_services = _revenue_and_count(
        db, mine, _between(day_start(current), tomorrow), amount_column=SH.price_coiffeur
    )
    week_earnings, week_services = _revenue_and_count(
        db, mine, _since(day_start(week_start(current))), amount_column=SH.price_coiffeur
    )
    month_earnings, month_services = _revenue_and_count(
        db, mine, _since(day_start(month_start(current))), amount_column=SH.price_coiffeur
    )

    first_day = current - timedelta(days=6)
    totals = _daily_totals(db, SH.price_coiffeur, first_day, mine)
    weekly = []
    for offset in range(7):
        day = first_day + timedelta(days=offset)
        earnings, services = totals.get(day.isoformat(), (0.0, 0))
        weekly.append({"label": french_day_label(day), "earnings": earnings, "services": services})

    recent = db.execute(
        select(SH, Salon.name)
        .outerjoin(Salon, Salon.id == SH.salon_id)
        .where(mine)
        .order_by(SH.service_date_time.desc())
        .limit(10)
    ).all()

    return {
        "todayEarnings": today_earnings,
        "todayServices": today_services,
        "weekEarnings": week_earnings,
        "weekServices": week_services,
        "monthEarnings": month_earnings,
        "monthServices": month_services,
        "weeklyData": weekly,
        "recentTransactions": recent,
    }


def get_monthly_costs(db: Session, first_day: date, salon_id: str | None = None) -> dict:
    """Fixed costs in force on the first of the month plus that month's variable expenses."""
    fixed_total = get_total_for_date(db, first_day, salon_id=salon_id)

    month_from, month_to = month_range(first_day)
    variable_stmt = select(func.coalesce(func.sum(Expense.amount), 0)).where(
        Expense.type == "variable",
        Expense.date >= month_from.date(),
        Expense.date < month_to.date(),
    )
    if salon_id:
        variable_stmt = variable_stmt.where(Expense.salon_id == salon_id)
    variable_total = money_float(db.execute(variable_stmt).scalar_one())

    return {
        "month": first_day.strftime("%Y-%m"),
        "salon_id": salon_id,
        "fixed_total": money_float(fixed_total),
        "variable_total": variable_total,
        "total": money_float(money_float(fixed_total) + variable_total),
        "reference_date": first_day,
    }
