from datetime import date
import calendar


def today() -> date:
    return date.today()


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: date, n: int) -> date:
    """Add n months to date d, clamping day to month end."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def is_same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month


def last_day_of_month(d: date) -> date:
    return d.replace(day=calendar.monthrange(d.year, d.month)[1])


def days_remaining_in_month(d: date) -> int:
    """Whole days from d until the last day of its month (0 on that day)."""
    return (last_day_of_month(d) - d).days


def format_month_pt(d: date) -> str:
    """Portuguese month label, e.g. 'outubro de 2026'."""
    return f"{MONTH_NAMES_PT[d.month - 1]} de {d.year}"


MONTH_NAMES_PT = [
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
]
