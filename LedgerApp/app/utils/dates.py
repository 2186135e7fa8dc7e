from datetime import date, datetime, timezone


def as_date(value):
    """
    Coerce date / datetime / 'YYYY-MM-DD' to a date. None stays None.
    Date-only strings are read as calendar dates, never shifted by timezone.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def month_start(value):
    d = as_date(value)
    return date(d.year, d.month, 1)


def month_index(value):
    """Months since year 0, so month arithmetic is plain integer arithmetic."""
    d = as_date(value)
    return d.year * 12 + (d.month - 1)


def utc_now():
    """Aware UTC timestamp for audit columns."""
    return datetime.now(timezone.utc)
