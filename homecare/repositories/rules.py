from datetime import date, datetime, time, timedelta

from homecare.core import config
from homecare.repositories.errors import RuleViolationError

TIME_FORMATS = ('%H:%M:%S', '%H:%M', '%H:%M:%S.%f')


def today() -> date:
    return date.today()


def booking_window(reference: date | None = None) -> tuple[date, date]:
    start = reference or today()
    return start, start + timedelta(days=config.BOOKING_WINDOW_DAYS)


def ensure_add_date_in_window(slot_date: date | None) -> date:
    if slot_date is None:
        raise RuleViolationError('Date is required.')

    window_start, window_end = booking_window()
    if slot_date < window_start:
        raise RuleViolationError(f'Cannot add past date: {slot_date.isoformat()}')
    if slot_date > window_end:
        raise RuleViolationError(
            f'Availability can only be added up to {config.BOOKING_WINDOW_DAYS} days ahead '
            f'(invalid: {slot_date.isoformat()}).'
        )
    return slot_date


def ensure_update_date_in_window(slot_date: date) -> date:
    window_start, window_end = booking_window()
    if slot_date < window_start:
        raise RuleViolationError('Cannot update to a past date.')
    if slot_date > window_end:
        raise RuleViolationError(f'Date cannot be more than {config.BOOKING_WINDOW_DAYS} days in the future.')
    return slot_date


def parse_time_of_day(value: str | None) -> time | None:
    """Parse "HH:mm" or "HH:mm:ss". Returns None for blank or unparsable input."""
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    for time_format in TIME_FORMATS:
        try:
            return datetime.strptime(normalized, time_format).time()
        except ValueError:
            continue
    return None


def slot_sort_key(slot_date: date, start_time: time | None) -> tuple[date, time]:
    return slot_date, start_time or time.min
