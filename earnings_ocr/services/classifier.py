from __future__ import annotations

"""Decides whether OCR text is a weekly or a daily earnings summary."""
import logging
import re
from typing import Callable, List, Tuple

from ..models.parsed_record import EntryType
from .extractors import COMPACT_RANGE, CROSS_MONTH_RANGE, MONTH_TOKEN, RANGE_DASH, WEEKDAY_TOKEN

LOGGER = logging.getLogger(__name__)

WEEKDAY_PREFIX = re.compile(rf"^\s*{WEEKDAY_TOKEN}\b", re.IGNORECASE | re.MULTILINE)
CLOCK_RANGE = re.compile(rf"\d{{1,2}}:\d{{2}}\s*(?:[ap]\.?\s*m\.?)?\s*{RANGE_DASH}\s*\d{{1,2}}:\d{{2}}", re.IGNORECASE)
LOOSE_START_END = re.compile(r"\b(?:start|end)(?:ed|s)?\b[^\n]*?\d{1,2}:\d{2}", re.IGNORECASE)


class EntryTypeClassifier:
    """Ordered rules, first match wins.

    Every week signal is tested before any day signal: a week summary lists
    its dashes per weekday ("Tuesday, Feb 10") and would otherwise look like
    a day.
    """

    DASHES_HEADER = re.compile(r"^\s*dashes\s*$", re.IGNORECASE | re.MULTILINE)
    WEEK_OF = re.compile(r"week\s+of", re.IGNORECASE)
    START_END_LABEL = re.compile(r"^\s*(?:start|end)\s+time\b", re.IGNORECASE | re.MULTILINE)
    DATED_WITH_YEAR = re.compile(
        rf"{MONTH_TOKEN}\s+\d{{1,2}},?\s*\d{{4}}(?!\s*{RANGE_DASH})",
        re.IGNORECASE,
    )

    def __init__(self, day_type: EntryType = EntryType.DAY) -> None:
        self._day_type = day_type
        self._rules: List[Tuple[str, Callable[[str], bool], EntryType]] = [
            ("dashes_header", self._matches(self.DASHES_HEADER), EntryType.WEEK),
            ("week_of", self._matches(self.WEEK_OF), EntryType.WEEK),
            ("compact_range", self._matches(COMPACT_RANGE), EntryType.WEEK),
            ("cross_month_range", self._matches(CROSS_MONTH_RANGE), EntryType.WEEK),
            ("start_end_labels", self._matches(self.START_END_LABEL), day_type),
            ("dated_with_year", self._matches(self.DATED_WITH_YEAR), day_type),
            ("weekday_with_times", self._weekday_with_times, day_type),
        ]

    @staticmethod
    def _matches(pattern: "re.Pattern[str]") -> Callable[[str], bool]:
        return lambda text: pattern.search(text) is not None

    @staticmethod
    def _weekday_with_times(text: str) -> bool:
        if not WEEKDAY_PREFIX.search(text):
            return False
        return bool(CLOCK_RANGE.search(text) or LOOSE_START_END.search(text))

    def classify(self, text: str) -> EntryType:
        for name, rule, entry_type in self._rules:
            if rule(text):
                LOGGER.debug("Classified OCR text as %s via %s", entry_type.value, name)
                return entry_type
        return EntryType.UNKNOWN
