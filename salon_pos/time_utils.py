from datetime import date, datetime, time


def day_start(value: date | None) -> datetime | None:
    """Midnight at the start of ``value``; datetimes pass through unchanged."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.min)


def day_end(value: date | None) -> datetime | None:
    """Last instant of ``value`` so an end date includes the whole day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time.max)
