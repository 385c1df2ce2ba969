import calendar
import re
from datetime import date

from household_ledger.domain.errors import InvalidCompetency

_COMPETENCY_RE = re.compile(r"^(\d{2})/(\d{4})$")


def parse_competency(key: str) -> tuple[int, int]:
    """Return ``(month, year)`` for a ``MM/YYYY`` key."""
    match = _COMPETENCY_RE.match(key.strip()) if isinstance(key, str) else None
    if not match:
        raise InvalidCompetency(f"Invalid competency '{key}', expected MM/YYYY.")
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise InvalidCompetency(f"Invalid competency '{key}', month must be 01-12.")
    return month, year


def format_competency(month: int, year: int) -> str:
    return f"{month:02d}/{year:04d}"


def normalize_competency(key: str) -> str:
    month, year = parse_competency(key)
    return format_competency(month, year)


def competency_of(value: date) -> str:
    return format_competency(value.month, value.year)


def _month_index(month: int, year: int) -> int:
    return year * 12 + (month - 1)


def add_months(base: date | str, n: int) -> str:
    """Shift ``base`` by ``n`` calendar months and return the competency key.

    Only month and year take part; the day of month of a ``date`` base is
    ignored, so there is no day overflow to worry about here.
    """
    if isinstance(base, date):
        month, year = base.month, base.year
    else:
        month, year = parse_competency(base)
    year, month_zero = divmod(_month_index(month, year) + n, 12)
    if year < 1:
        raise InvalidCompetency(f"Shifting {base} by {n} months leaves the calendar.")
    return format_competency(month_zero + 1, year)


def months_between(a: str, b: str) -> int:
    """Number of months from ``a`` to ``b`` (negative when ``b`` is earlier)."""
    month_a, year_a = parse_competency(a)
    month_b, year_b = parse_competency(b)
    return _month_index(month_b, year_b) - _month_index(month_a, year_a)


def competency_sort_key(key: str) -> tuple[int, int]:
    month, year = parse_competency(key)
    return year, month


def clamp_day(key: str, day: int) -> date:
    """Calendar date for ``day`` in month ``key``, clamped to the month's last day."""
    month, year = parse_competency(key)
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, max(1, min(day, last_day)))
