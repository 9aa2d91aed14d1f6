from __future__ import annotations

"""Parses OCR text into structured earnings records."""
import logging
from enum import Enum
from typing import Optional

from ..models.parsed_record import EntryType, ParsedDay, ParsedRecord, ParsedWeek
from . import extractors
from .classifier import EntryTypeClassifier
from .offers import OfferReconstructor

LOGGER = logging.getLogger(__name__)


class RecordSchema(str, Enum):
    FULL = "full"
    SESSION = "session"


class ParserService:
    """Best-effort text → record conversion. Never raises; unknown fields stay ``None``.

    With the session schema, day summaries are tagged ``session`` instead of ``day``.
    """

    def __init__(self, schema: RecordSchema = RecordSchema.FULL, *, year: Optional[int] = None) -> None:
        self._schema = RecordSchema(schema)
        day_type = EntryType.SESSION if self._schema is RecordSchema.SESSION else EntryType.DAY
        self._classifier = EntryTypeClassifier(day_type=day_type)
        self._offers = OfferReconstructor()
        self._year = year

    def parse(self, text: str) -> ParsedRecord:
        entry_type = self._classifier.classify(text)
        if entry_type is EntryType.WEEK:
            return ParsedRecord(entry_type=entry_type, raw=text, week=self.parse_week(text))
        # unknown falls through to the most granular extractor
        day = self.parse_day(text)
        LOGGER.debug("Parsed %s with %d offers", entry_type.value, len(day.offers))
        return ParsedRecord(entry_type=entry_type, raw=text, day=day)

    def parse_week(self, text: str) -> ParsedWeek:
        date_start, date_end = extractors.parse_date_range(text, self._year)
        return ParsedWeek(
            date_start=date_start,
            date_end=date_end,
            active_time=extractors.extract_labeled_duration(text, "active"),
            total_time=extractors.extract_labeled_duration(text, "total"),
            completed_deliveries=extractors.extract_deliveries(text, count_dashes=True),
            total_earnings=extractors.extract_total_earnings(text),
        )

    def parse_day(self, text: str) -> ParsedDay:
        start_time = extractors.extract_labeled_time(text, "start")
        end_time = extractors.extract_labeled_time(text, "end")
        if start_time is None and end_time is None:
            start_time, end_time = extractors.extract_time_range(text)

        return ParsedDay(
            date=self._day_date(text),
            total_earnings=extractors.extract_total_earnings(text),
            base_pay=extractors.extract_base_pay(text),
            tips=extractors.extract_tips(text),
            start_time=start_time,
            end_time=end_time,
            active_time=extractors.extract_labeled_duration(text, "active"),
            total_time=extractors.extract_labeled_duration(text, "total"),
            offers_count=extractors.extract_offers_count(text),
            deliveries=extractors.extract_deliveries(text),
            offers=self._offers.extract(text),
        )

    def _day_date(self, text: str) -> Optional[str]:
        weekday = extractors.WEEKDAY_DATE_PATTERN.search(text)
        if weekday:
            parsed = extractors.parse_loose_date(weekday.group(1), self._year)
            if parsed:
                return parsed
        return extractors.parse_loose_date(text, self._year)


_DEFAULT_PARSER = ParserService()


def parse_ocr_text(text: str) -> ParsedRecord:
    return _DEFAULT_PARSER.parse(text)
