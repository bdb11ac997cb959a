"""
Date and time formatting for Completed Tasks.

Journal pages in the host are named after a user-chosen date pattern such as
"MMM do, yyyy" or "yyyy-MM-dd". The completion date property must reference
that page exactly, so dates are rendered with the same pattern language the
host uses. Times use the simpler bracket-escaped pattern language of the
"timeFormat" setting (e.g. "HH:mm").

Names are always rendered in English, independent of the process locale.
"""

import re
from datetime import date, datetime, timedelta
from typing import List

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December"
)

WEEKDAY_NAMES = (
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"
)

# Longest alternatives first: the regex engine takes the first match.
_DATE_TOKEN_RE = re.compile(
    r"'(?:[^']|'')*'|yyyy|yy|y|MMMM|MMM|MM|M|do|dd|d|EEEEE|EEEE|EEE|EE|E"
)

_TIME_TOKEN_RE = re.compile(
    r"\[[^\]]*\]|YYYY|YY|MMMM|MMM|MM|M|DD|D|dddd|ddd|dd|d|HH|H|hh|h|mm|m|ss|s|SSS|A|a|ZZ|Z"
)

_WEEKDAY_RUN_RE = re.compile(r"E{1,3}")

DEFAULT_TIME_FORMAT = "YYYY-MM-DDTHH:mm:ssZ"


def ordinal(n: int) -> str:
    """Render a day number with its English ordinal suffix (1st, 2nd, 11th)."""
    if 11 <= n % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def normalize_weekday_pattern(preferred_format: str) -> str:
    """
    Force the first run of one to three 'E' characters to 'EEE'.

    The host renders E, EE and EEE all as the abbreviated weekday name when it
    names journal pages, so the pattern is normalized before formatting.
    """
    return _WEEKDAY_RUN_RE.sub("EEE", preferred_format, count=1)


def _date_token(d: date, token: str) -> str:
    if token.startswith("'"):
        return token[1:-1].replace("''", "'")
    if token == "yyyy" or token == "y":
        return f"{d.year:04d}"
    if token == "yy":
        return f"{d.year % 100:02d}"
    if token == "MMMM":
        return MONTH_NAMES[d.month - 1]
    if token == "MMM":
        return MONTH_NAMES[d.month - 1][:3]
    if token == "MM":
        return f"{d.month:02d}"
    if token == "M":
        return str(d.month)
    if token == "do":
        return ordinal(d.day)
    if token == "dd":
        return f"{d.day:02d}"
    if token == "d":
        return str(d.day)
    weekday = WEEKDAY_NAMES[d.weekday()]
    if token == "EEEEE":
        return weekday[0]
    if token == "EEEE":
        return weekday
    return weekday[:3]


def format_date(d: date, pattern: str) -> str:
    """
    Format a date with a journal page pattern.

    Args:
        d: The date to format
        pattern: Pattern such as "MMM do, yyyy" or "EEE, dd.MM.yyyy"

    Returns:
        The formatted date label
    """
    return _DATE_TOKEN_RE.sub(lambda m: _date_token(d, m.group(0)), pattern)


def get_date_for_page(d: date, preferred_format: str) -> str:
    """
    Get the page link for the journal page of a date.

    Args:
        d: The date (a datetime is accepted, its time is ignored)
        preferred_format: The host's preferred date format

    Returns:
        The link, e.g. "[[Oct 16th, 2026]]"
    """
    return f"[[{format_date(d, preferred_format)}]]"


def _utc_offset(dt: datetime, separator: str) -> str:
    aware = dt if dt.tzinfo is not None else dt.astimezone()
    offset = aware.utcoffset() or timedelta(0)
    minutes = int(offset.total_seconds() // 60)
    sign = "-" if minutes < 0 else "+"
    hours, minutes = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}{separator}{minutes:02d}"


def _time_token(dt: datetime, token: str) -> str:
    if token.startswith("["):
        return token[1:-1]
    if token == "YYYY":
        return f"{dt.year:04d}"
    if token == "YY":
        return f"{dt.year % 100:02d}"
    if token == "MMMM":
        return MONTH_NAMES[dt.month - 1]
    if token == "MMM":
        return MONTH_NAMES[dt.month - 1][:3]
    if token == "MM":
        return f"{dt.month:02d}"
    if token == "M":
        return str(dt.month)
    if token == "DD":
        return f"{dt.day:02d}"
    if token == "D":
        return str(dt.day)
    if token == "dddd":
        return WEEKDAY_NAMES[dt.weekday()]
    if token == "ddd":
        return WEEKDAY_NAMES[dt.weekday()][:3]
    if token == "dd":
        return WEEKDAY_NAMES[dt.weekday()][:2]
    if token == "d":
        # 0 is Sunday
        return str((dt.weekday() + 1) % 7)
    if token == "HH":
        return f"{dt.hour:02d}"
    if token == "H":
        return str(dt.hour)
    if token in ("hh", "h"):
        hour = dt.hour % 12 or 12
        return f"{hour:02d}" if token == "hh" else str(hour)
    if token == "mm":
        return f"{dt.minute:02d}"
    if token == "m":
        return str(dt.minute)
    if token == "ss":
        return f"{dt.second:02d}"
    if token == "s":
        return str(dt.second)
    if token == "SSS":
        return f"{dt.microsecond // 1000:03d}"
    if token == "A":
        return "AM" if dt.hour < 12 else "PM"
    if token == "a":
        return "am" if dt.hour < 12 else "pm"
    if token == "ZZ":
        return _utc_offset(dt, "")
    return _utc_offset(dt, ":")


def format_time(dt: datetime, pattern: str) -> str:
    """
    Format a timestamp with a time pattern such as "HH:mm" or "h:mm A".

    Text in square brackets is copied literally. An empty pattern gives an
    ISO 8601 timestamp.
    """
    pattern = pattern or DEFAULT_TIME_FORMAT
    return _TIME_TOKEN_RE.sub(lambda m: _time_token(dt, m.group(0)), pattern)


def past_week_dates(today: date) -> List[date]:
    """Get the seven days before `today`, most recent first."""
    return [today - timedelta(days=offset) for offset in range(1, 8)]
