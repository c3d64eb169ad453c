"""Parser for iCalendar DATE and DATE-TIME tokens."""
import logging
from datetime import datetime
from typing import Optional

logger = logging.getLogger(__name__)

DATE_LENGTH = 8
TIME_SEPARATOR = 'T'


def _two_digits(token: str, start: int) -> Optional[int]:
    chunk = token[start:start + 2]
    if len(chunk) != 2 or not chunk.isascii() or not chunk.isdigit():
        return None
    return int(chunk)


def parse_ical_date(token: Optional[str]) -> Optional[datetime]:
    """
    Parse an ICS date token into a naive local datetime.

    Accepts ``YYYYMMDD`` and ``YYYYMMDDTHHMM[SS][Z]``. The hour and minute
    are taken as local wall-clock time; seconds and a trailing ``Z`` are
    ignored, so no UTC conversion happens. A missing or malformed time part
    defaults to midnight.

    Args:
        token: Raw property value such as ``20260116T100000Z``

    Returns:
        Naive datetime, or None if the date part is not eight digits or is
        not a real calendar date
    """
    if not token:
        return None

    token = token.strip()
    date_part = token[:DATE_LENGTH]
    if len(date_part) != DATE_LENGTH or not date_part.isascii() or not date_part.isdigit():
        return None

    year = int(date_part[0:4])
    month = int(date_part[4:6])
    day = int(date_part[6:8])
    hour = 0
    minute = 0

    if len(token) > DATE_LENGTH:
        separator = token.find(TIME_SEPARATOR, DATE_LENGTH)
        if separator != -1:
            time_start = separator + 1
            hour = _two_digits(token, time_start) or 0
            minute = _two_digits(token, time_start + 2) or 0
            if hour > 23 or minute > 59:
                hour, minute = 0, 0

    try:
        return datetime(year, month, day, hour, minute)
    except ValueError:
        logger.debug(f"Invalid calendar date in iCal token: {token}")
        return None
