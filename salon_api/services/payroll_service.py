"""Monthly salary cost import.

Payroll lines arrive either as a JSON array or as the CSV export of the payroll
spreadsheet. Importing a month replaces every line already stored for it.
"""

import csv
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from io import StringIO
from typing import Any

from sqlalchemy import String, delete, func, literal, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from salon_api.core.money import to_money
from salon_api.core.observability import log_event
from salon_api.models.hairdresser import Hairdresser
from salon_api.models.payroll import SalaryCost

AMOUNT_FIELDS = ("net_salary", "gross_salary", "total_cost", "charges")


@dataclass
class ImportResult:
    imported: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)


def detect_delimiter(csv_content: str) -> str:
    first_line = csv_content.lstrip().splitlines()[0] if csv_content.strip() else ""
    return ";" if ";" in first_line else ","


def parse_csv_rows(csv_content: str, delimiter: str | None = None) -> list[dict[str, str]]:
    # Spreadsheet exports often start with a UTF-8 byte order mark.
    csv_content = csv_content.lstrip("\ufeff")
    reader = csv.DictReader(StringIO(csv_content), delimiter=delimiter or detect_delimiter(csv_content))
    if not reader.fieldnames:
        raise ValueError("CSV header row is missing")

    rows = []
    for raw in reader:
        normalized = {
            key.strip().lower(): (value or "").strip()
            for key, value in raw.items()
            if key is not None
        }
        if any(normalized.values()):
            rows.append(normalized)
    return rows


def parse_amount(value: Any) -> Decimal:
    """Lenient amount parsing; anything unreadable counts as zero."""
    if value is None or isinstance(value, bool):
        return to_money(0)
    if isinstance(value, (int, float, Decimal)):
        return to_money(value)
    cleaned = str(value).strip().replace("€", "")
    for space in (" ", "\u00a0", "\u202f"):
        cleaned = cleaned.replace(space, "")
    if "," in cleaned and "." in cleaned:
        # the right-most separator is the decimal one: "1.234,56" or "1,234.56"
        if cleaned.rfind(",") > cleaned.rfind("."):
            cleaned = cleaned.replace(".", "").replace(",", ".")
        else:
            cleaned = cleaned.replace(",", "")
    elif "," in cleaned:
        cleaned = cleaned.replace(",", ".")
    try:
        return to_money(Decimal(cleaned))
    except InvalidOperation:
        return to_money(0)


def _required_text(row: dict[str, Any], key: str) -> str:
    value = row.get(key)
    if value is None or not str(value).strip():
        raise ValueError(f"{key} is required")
    return str(value).strip()


def match_hairdresser_id(db: Session, last_name: str, first_name: str) -> str | None:
    """Find a hairdresser by last name and first name.

    Last names compare case-insensitively. First names match exactly or when one
    is a prefix of the other; only the part before a comma is considered.
    """
    first = first_name.split(",")[0].strip().lower()
    stored_first = func.lower(Hairdresser.first_name)
    return db.execute(
        select(Hairdresser.id)
        .where(
            func.lower(Hairdresser.last_name) == last_name.strip().lower(),
            or_(
                stored_first == first,
                stored_first.startswith(first, autoescape=True),
                literal(first, String).startswith(stored_first),
            ),
        )
        .limit(1)
    ).scalar_one_or_none()


def import_salary_costs(db: Session, *, month: int, year: int, rows: list[dict[str, Any]]) -> ImportResult:
    """Replace the salary lines of ``month``/``year`` with ``rows`` in one transaction.

    Each row is inserted inside a savepoint; a failing row is reported in
    ``errors`` and the rest of the batch still commits.
    """
    result = ImportResult()
    try:
        db.execute(delete(SalaryCost).where(SalaryCost.month == month, SalaryCost.year == year))

        for row in rows:
            try:
                last_name = _required_text(row, "last_name")
                first_name = _required_text(row, "first_name")
                with db.begin_nested():
                    db.add(
                        SalaryCost(
                            hairdresser_id=match_hairdresser_id(db, last_name, first_name),
                            last_name=last_name,
                            first_name=first_name,
                            month=month,
                            year=year,
                            **{name: parse_amount(row.get(name)) for name in AMOUNT_FIELDS},
                        )
                    )
            except (ValueError, SQLAlchemyError) as exc:
                result.errors.append({"row": row, "error": str(exc)})
                continue
            result.imported += 1

        db.commit()
    except Exception:
        db.rollback()
        raise

    log_event(
        "salary_costs.import",
        month=month,
        year=year,
        imported=result.imported,
        rejected=len(result.errors),
    )
    return result
