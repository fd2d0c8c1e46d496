"""Date helpers for receipt parsing and formatting."""

import re
from datetime import datetime

RU_MONTHS = {
    "января": 1,
    "февраля": 2,
    "марта": 3,
    "апреля": 4,
    "мая": 5,
    "июня": 6,
    "июля": 7,
    "августа": 8,
    "сентября": 9,
    "октября": 10,
    "ноября": 11,
    "декабря": 12,
}

ISO_DATE_PATTERN = re.compile(r"(\d{4})[-.](\d{2})[-.](\d{2})")
DAY_FIRST_DATE_PATTERN = re.compile(r"(\d{2})[-.](\d{2})[-.](\d{4})")
TIME_PATTERN = re.compile(r"(\d{2}):(\d{2})(?::(\d{2}))?")
# "14 марта 2025 г. в 18:42"
RU_LONG_DATE_PATTERN = re.compile(
    r"(\d{1,2})\s+(" + "|".join(RU_MONTHS) + r")\s+(\d{4})\s*г\.\s*в\s*(\d{2}):(\d{2})",
    re.IGNORECASE,
)


def _build_iso(year: int, month: int, day: int, hour: int = 0, minute: int = 0, second: int = 0) -> str | None:
    try:
        return datetime(year, month, day, hour, minute, second).isoformat()
    except ValueError:
        return None


def parse_numeric_date(text: str) -> str | None:
    """Parse "2025-03-14", "2025.03.14" or "14.03.2025" (with optional HH:MM) to ISO-8601."""
    match = ISO_DATE_PATTERN.search(text)
    if match:
        year, month, day = (int(part) for part in match.groups())
    else:
        match = DAY_FIRST_DATE_PATTERN.search(text)
        if not match:
            return None
        day, month, year = (int(part) for part in match.groups())

    hour = minute = second = 0
    time_match = TIME_PATTERN.search(text, match.end())
    if time_match:
        hour, minute = int(time_match.group(1)), int(time_match.group(2))
        second = int(time_match.group(3) or 0)
        if hour > 23 or minute > 59 or second > 59:
            hour = minute = second = 0
    return _build_iso(year, month, day, hour, minute, second)


def parse_russian_long_date(text: str) -> str | None:
    """Parse "14 марта 2025 г. в 18:42" to ISO-8601."""
    match = RU_LONG_DATE_PATTERN.search(text)
    if not match:
        return None
    day, month_name, year, hour, minute = match.groups()
    month = RU_MONTHS[month_name.lower()]
    return _build_iso(int(year), month, int(day), int(hour), int(minute))


def fallback_receipt_date() -> str:
    """Timestamp used when a receipt prints no readable date."""
    return datetime.now().replace(microsecond=0).isoformat()


def display_date(iso_date: str | None) -> str:
    """Format an ISO date the way the chat shows it (dd.mm.yyyy)."""
    if not iso_date:
        return "-"
    try:
        return datetime.fromisoformat(iso_date).strftime("%d.%m.%Y")
    except ValueError:
        return iso_date
