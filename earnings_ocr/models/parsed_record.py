from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class EntryType(str, Enum):
    DAY = "day"
    WEEK = "week"
    SESSION = "session"
    UNKNOWN = "unknown"


class OfferLine(BaseModel):
    model_config = ConfigDict(frozen=True)

    store: str
    total_earnings: Optional[float] = None


class ParsedDay(BaseModel):
    """Fields of a single day (or dash session) summary. Dates are ISO, times are 24h HH:MM."""

    model_config = ConfigDict(frozen=True)

    date: Optional[str] = None
    total_earnings: Optional[float] = None
    base_pay: Optional[float] = None
    tips: Optional[float] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    active_time: Optional[int] = Field(default=None, description="Minutes.")
    total_time: Optional[int] = Field(default=None, description="Minutes.")
    offers_count: Optional[int] = None
    deliveries: Optional[int] = None
    offers: List[OfferLine] = Field(default_factory=list)


class ParsedWeek(BaseModel):
    model_config = ConfigDict(frozen=True)

    date_start: Optional[str] = None
    date_end: Optional[str] = None
    active_time: Optional[int] = None
    total_time: Optional[int] = None
    completed_deliveries: Optional[int] = None
    total_earnings: Optional[float] = None


class ParsedRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    entry_type: EntryType
    raw: str
    day: Optional[ParsedDay] = None
    week: Optional[ParsedWeek] = None

    @property
    def offers(self) -> List[OfferLine]:
        return list(self.day.offers) if self.day else []
