import re
from datetime import date, datetime, timedelta

MONTH_RE = re.compile(r"^(\d{4})-(\d{1,2})$")
PERIODS = ("week", "month", "year")

# Short weekday names as rendered by the fr-FR locale, Monday first.
FRENCH_WEEKDAYS = ("lun.", "mar.", "mer.", "jeu.", "ven.", "sam.", "dim.")


def now_local() -> datetime:
    """Current local time, wrapped so tests can patch it."""
    return datetime.now()


def today() -> date:
    return now_local().date()


def day_start(value: date) -> datetime:
    return datetime(value.year, value.month, value.day)


def week_start(value: date) -> date:
    return value - timedelta(days=value.weekday())


def month_start(value: date) -> date:
    return value.replace(day=1)


def next_month_start(value: date) -> date:
    if value.month == 12:
        return date(value.year + 1, 1, 1)
    return date(value.year, value.month + 1, 1)


def year_start(value: date) -> date:
    return date(value.year, 1, 1)


def parse_month(value: str) -> date:
    """Parse a ``YYYY-MM`` string into the first day of that month."""
    match = MONTH_RE.match(value.strip())
    if not match:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    year, month = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month {value!r}, expected YYYY-MM")
    return date(year, month, 1)


def month_range(first_day: date) -> tuple[datetime, datetime]:
    return day_start(first_day), day_start(next_month_start(first_day))


def period_start(period: str | None, reference: date | None = None) -> datetime | None:
    """Lower bound of a ``week``/``month``/``year`` period; ``None`` means no bound."""
    ref = reference or today()
    if period == "week":
        return day_start(week_start(ref))
    if period == "month":
        return day_start(month_start(ref))
    if period == "year":
        return day_start(year_start(ref))
    return None


def french_day_label(value: date) -> str:
    return f"{FRENCH_WEEKDAYS[value.weekday()]} {value.day}"


def date_key(value) -> str:
    # func.date() yields a string on SQLite and a date on PostgreSQL.
    if isinstance(value, (date, datetime)):
        return value.strftime("%Y-%m-%d")
    return str(value)[:10]
