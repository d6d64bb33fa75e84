import re
from datetime import date, datetime
from typing import Optional, Tuple

PRESENT_WORDS = {"present", "current", "now", "ongoing", "today"}

# (format, precision) where precision counts the components the format carries:
# 1 = year, 2 = year and month, 3 = full date.
FORMATS = [
    ("%Y-%m-%d", 3),
    ("%Y-%m", 2),
    ("%Y/%m", 2),
    ("%m/%Y", 2),
    ("%b %Y", 2),
    ("%B %Y", 2),
    ("%b. %Y", 2),
    ("%d %b %Y", 3),
    ("%d %B %Y", 3),
    ("%Y", 1),
]


def is_present(text: Optional[str]) -> bool:
    """True for the open-ended end dates AI output and people tend to write."""
    return bool(text) and text.strip().lower() in PRESENT_WORDS


def parse_date_with_precision(text: Optional[str]) -> Tuple[Optional[date], int]:
    """
    Best-effort parse of the loose date strings found in résumés.
    Returns (None, 0) when nothing matches; callers treat that as "not comparable".
    """
    if not text:
        return None, 0
    cleaned = re.sub(r"\s+", " ", text.strip())
    for fmt, precision in FORMATS:
        try:
            return datetime.strptime(cleaned, fmt).date(), precision
        except ValueError:
            continue
    return None, 0


def truncate(value: date, precision: int) -> Tuple[int, ...]:
    """(year,), (year, month) or (year, month, day) for ordering at a given precision."""
    return (value.year, value.month, value.day)[:precision]
