"""Field extractors for OCR'd earnings summaries.

Each function is independent and returns ``None`` when its field cannot be
found; none of them raise on malformed input.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Iterator, Optional, Tuple

MONTHS = {
    "jan": 1, "feb": 2, "mar": 3, "apr": 4, "may": 5, "jun": 6,
    "jul": 7, "aug": 8, "sep": 9, "sept": 9, "oct": 10, "nov": 11, "dec": 12,
    "january": 1, "february": 2, "march": 3, "april": 4, "june": 6,
    "july": 7, "august": 8, "september": 9, "october": 10, "november": 11, "december": 12,
}

MONTH_TOKEN = (
    r"\b(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)\b\.?"
)
WEEKDAY_TOKEN = r"(?:mon|tue|wed|thu|fri|sat|sun)(?:day|sday|nesday|rsday|urday|s|rs)?"
RANGE_DASH = r"[–—-]+"

CURRENCY_PATTERN = re.compile(r"\$?(\d[\d,]*\.?\d{0,2})")
DOLLAR_AMOUNT_PATTERN = re.compile(r"\$\s?\d[\d,]*\.\d{2}")

DURATION_FULL = re.compile(r"(\d+)\s*h(?:ours?|rs?)?\s*(\d+)\s*m(?:inutes?|ins?)?", re.IGNORECASE)
DURATION_HOURS = re.compile(r"(\d+)\s*h(?:ours?|rs?)?(?![a-z])(?!\s*\d)", re.IGNORECASE)
DURATION_MINUTES = re.compile(r"(\d+)\s*m(?:inutes?|ins?)?(?![a-z])(?!\s*\d)", re.IGNORECASE)

TIME_WITH_MERIDIEM = re.compile(r"(\d{1,2}):(\d{2})\s*(?:([AaPp])\.?\s*[Mm]\b\.?)?")

WEEKDAY_DATE_PATTERN = re.compile(
    rf"\b{WEEKDAY_TOKEN}\b\.?[,\s]+([A-Za-z]+\.?[ \t]+\d{{1,2}}(?:,?[ \t]*\d{{4}})?)",
    re.IGNORECASE,
)
LOOSE_DATE_PATTERN = re.compile(r"([A-Za-z]+)\.?[ \t]+(\d{1,2})(?!\d)(?:(?:,[ \t]*|[ \t]+)(\d{4}))?")
CROSS_MONTH_RANGE = re.compile(
    rf"({MONTH_TOKEN}\s+\d{{1,2}}(?:,?\s*\d{{4}})?)\s*{RANGE_DASH}\s*({MONTH_TOKEN}\s+\d{{1,2}}(?:,?\s*\d{{4}})?)",
    re.IGNORECASE,
)
COMPACT_RANGE = re.compile(
    rf"({MONTH_TOKEN})\s+(\d{{1,2}})\s*{RANGE_DASH}\s*(\d{{1,2}})(?![\d:])(?!\s*{MONTH_TOKEN})(?:,?\s*(\d{{4}}))?",
    re.IGNORECASE,
)

BASE_PAY_LABELS = ("doordash pay", "base pay")
TIPS_LABELS = ("customer tips", "customer tip")
TOTAL_LABELS = ("total earnings", "total pay", "earnings", "total")

OFFERS_COUNT_PATTERN = re.compile(r"^\s*offers?\b[:\s]*(\d+)\b", re.IGNORECASE | re.MULTILINE)
DELIVERY_PATTERNS = (
    re.compile(r"(\d+)\s+(?:completed\s+)?deliveri(?:es|ed)", re.IGNORECASE),
    re.compile(r"(?:completed\s+)?deliveries[:\s]+(\d+)", re.IGNORECASE),
)
DASH_COUNT_PATTERN = re.compile(r"(\d+)\s+dash(?:es)?\b", re.IGNORECASE)


def parse_currency(text: str) -> Optional[float]:
    """First dollar-ish number in ``text``; "$1,234.56" → 1234.56, "$0.00" → 0.0."""
    match = CURRENCY_PATTERN.search(text)
    if not match:
        return None
    try:
        return float(match.group(1).replace(",", ""))
    except ValueError:
        return None


def parse_duration(text: str) -> Optional[int]:
    """Minutes from "1h 30m", "1hr30 min", "3h" or "45m"."""
    full = DURATION_FULL.search(text)
    if full:
        return int(full.group(1)) * 60 + int(full.group(2))
    hours = DURATION_HOURS.search(text)
    if hours:
        return int(hours.group(1)) * 60
    minutes = DURATION_MINUTES.search(text)
    if minutes:
        return int(minutes.group(1))
    return None


def parse_time(text: str) -> Optional[str]:
    """"10:32 AM" → "10:32", "3:44 PM" → "15:44", "12:05 AM" → "00:05"."""
    match = TIME_WITH_MERIDIEM.search(text)
    if not match:
        return None
    hours = int(match.group(1))
    minutes = int(match.group(2))
    meridiem = (match.group(3) or "").upper()
    if meridiem == "P" and hours != 12:
        hours += 12
    elif meridiem == "A" and hours == 12:
        hours = 0
    if hours > 23 or minutes > 59:
        return None
    return f"{hours:02d}:{minutes:02d}"


def _iso_date(year: int, month: int, day: int) -> Optional[str]:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def parse_loose_date(text: str, year: Optional[int] = None) -> Optional[str]:
    """"Jan 6" / "January 6, 2024" → ISO date. The current year fills a missing year."""
    fallback_year = year if year is not None else date.today().year
    for match in LOOSE_DATE_PATTERN.finditer(text):
        month = MONTHS.get(match.group(1).lower())
        if month is None:
            continue
        full_year = int(match.group(3)) if match.group(3) else fallback_year
        return _iso_date(full_year, month, int(match.group(2)))
    return None


def parse_date_range(text: str, year: Optional[int] = None) -> Tuple[Optional[str], Optional[str]]:
    """Start/end of "Jan 6 – Jan 12" or "Feb 9-15". A December→January range rolls the end year."""
    start: Optional[str] = None
    end: Optional[str] = None

    cross = CROSS_MONTH_RANGE.search(text)
    if cross:
        start = parse_loose_date(cross.group(1), year)
        end = parse_loose_date(cross.group(2), int(start[:4]) if start else year)
    else:
        compact = COMPACT_RANGE.search(text)
        if compact:
            month_token, first_day, last_day, explicit_year = compact.groups()
            range_year = int(explicit_year) if explicit_year else year
            start = parse_loose_date(f"{month_token} {first_day}", range_year)
            end = parse_loose_date(f"{month_token} {last_day}", range_year)

    if start and end and end < start:
        rolled = _iso_date(int(end[:4]) + 1, int(end[5:7]), int(end[8:10]))
        end = rolled or end
    return start, end


def _lines_after_label(text: str, labels: Iterable[str]) -> Iterator[str]:
    """Remainder of every line that starts with one of ``labels``, label order first."""
    for label in labels:
        pattern = re.compile(rf"^[ \t]*{re.escape(label)}\b[: \t]*(.*)$", re.IGNORECASE | re.MULTILINE)
        for match in pattern.finditer(text):
            yield match.group(1)


def extract_labeled_currency(text: str, labels: Iterable[str]) -> Optional[float]:
    for rest in _lines_after_label(text, labels):
        amount = DOLLAR_AMOUNT_PATTERN.search(rest)
        value = parse_currency(amount.group(0)) if amount else parse_currency(rest)
        if value is not None:
            return value
    return None


def extract_base_pay(text: str) -> Optional[float]:
    return extract_labeled_currency(text, BASE_PAY_LABELS)


def extract_tips(text: str) -> Optional[float]:
    return extract_labeled_currency(text, TIPS_LABELS)


def extract_total_earnings(text: str) -> Optional[float]:
    """Labelled total first, otherwise the first prominent "$X.XX" amount."""
    for rest in _lines_after_label(text, TOTAL_LABELS):
        amount = DOLLAR_AMOUNT_PATTERN.search(rest)
        if amount:
            return parse_currency(amount.group(0))
    amount = DOLLAR_AMOUNT_PATTERN.search(text)
    return parse_currency(amount.group(0)) if amount else None


def extract_offers_count(text: str) -> Optional[int]:
    match = OFFERS_COUNT_PATTERN.search(text)
    return int(match.group(1)) if match else None


def extract_deliveries(text: str, *, count_dashes: bool = False) -> Optional[int]:
    patterns = DELIVERY_PATTERNS + ((DASH_COUNT_PATTERN,) if count_dashes else ())
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return int(match.group(1))
    return None


def extract_labeled_duration(text: str, label: str) -> Optional[int]:
    """Duration after "<label> time", falling back to "<duration> <label>" phrasing."""
    labeled = re.search(rf"\b{label}\s+time[:\s]*([^\n]+)", text, re.IGNORECASE)
    if labeled:
        minutes = parse_duration(labeled.group(1))
        if minutes is not None:
            return minutes
    suffix = r"(?:on\s+)?(?:dash|total)" if label == "total" else re.escape(label)
    trailing = re.search(rf"([\dhrsoumin ]*\d\s*m(?:in)?s?)\s+{suffix}\b", text, re.IGNORECASE)
    if trailing:
        return parse_duration(trailing.group(1))
    return None


def extract_labeled_time(text: str, label: str) -> Optional[str]:
    match = re.search(rf"\b{label}\s+time[:\s]*([^\n]+)", text, re.IGNORECASE)
    return parse_time(match.group(1)) if match else None


TIME_RANGE_PATTERN = re.compile(
    rf"(\d{{1,2}}:\d{{2}}\s*(?:[AaPp]\.?\s*[Mm]\.?)?)\s*{RANGE_DASH}\s*(\d{{1,2}}:\d{{2}}\s*(?:[AaPp]\.?\s*[Mm]\.?)?)"
)


def extract_time_range(text: str) -> Tuple[Optional[str], Optional[str]]:
    match = TIME_RANGE_PATTERN.search(text)
    if not match:
        return None, None
    return parse_time(match.group(1)), parse_time(match.group(2))


def format_minutes(minutes: Optional[int]) -> str:
    """Display helper: 90 → "1h 30m", 45 → "45m", 120 → "2h"."""
    if minutes is None:
        return ""
    hours, rest = divmod(minutes, 60)
    if hours == 0:
        return f"{rest}m"
    if rest == 0:
        return f"{hours}h"
    return f"{hours}h {rest}m"
