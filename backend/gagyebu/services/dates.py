import calendar
from datetime import UTC, date, datetime, timedelta


def today_utc() -> date:
    return datetime.now(UTC).date()


def first_day_of_month(value: date) -> date:
    return value.replace(day=1)


def shift_months(value: date, delta_months: int) -> date:
    month_index = (value.month - 1) + delta_months
    year = value.year + (month_index // 12)
    month = (month_index % 12) + 1
    return date(year, month, 1)


def last_day_of_month(value: date) -> date:
    first_next = shift_months(first_day_of_month(value), 1)
    return first_next - timedelta(days=1)


def add_months_anchored(value: date, delta_months: int, anchor_day: int) -> date:
    """Move by whole months, landing on anchor_day or the month's last day."""
    first = shift_months(value, delta_months)
    days_in_month = calendar.monthrange(first.year, first.month)[1]
    return first.replace(day=min(anchor_day, days_in_month))


def parse_month(value: str) -> date:
    """Parse ``YYYY-MM`` into the first day of that month."""
    return datetime.strptime(value, "%Y-%m").date()
