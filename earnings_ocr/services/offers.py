from __future__ import annotations

"""Rebuilds per-offer line items from OCR text that wrapped store names."""
import re
from typing import Iterable, List

from ..models.parsed_record import OfferLine
from .extractors import WEEKDAY_TOKEN, parse_currency

SKIP_PATTERN = re.compile(
    r"^(?:week|day|date|total|active|start|end|deliveri\w*|dash(?:es)?|offers?|earnings|"
    rf"doordash\s+pay|base\s+pay|customer\s+tips?|tips?|{WEEKDAY_TOKEN})\b"
    r"|^\d+\s+(?:completed\s+)?(?:deliveri\w*|dash(?:es)?|offers?)\b",
    re.IGNORECASE,
)
# Checkmarks are often read back as "v", "V" or "y"; anything else non-alphanumeric counts too.
GLYPH = r"(?:[vVyY]|[^\w\s$])"
AMOUNT = r"\$?\s?\d[\d,]*\.\d{2}"
TRAILING_BRACKET = r"[)\]}|]?"

CURRENCY_IN_LINE = re.compile(AMOUNT)
AMOUNT_LINE = re.compile(rf"(?:^|\s){GLYPH}?\s*{AMOUNT}\s*{TRAILING_BRACKET}\s*$")
OFFER_PATTERN = re.compile(
    rf"^(?P<store>.+?)(?:\s+{GLYPH})?\s*(?P<amount>{AMOUNT})\s*{TRAILING_BRACKET}\s*$"
)


class OfferReconstructor:
    """Joins a store line with the amount line OCR split off, then extracts offers.

    Only a single continuation line is recognised; a store name wrapped over
    three or more lines comes out as a malformed offer.
    """

    def is_skip_line(self, line: str) -> bool:
        return SKIP_PATTERN.match(line) is not None

    def join_wrapped_lines(self, lines: Iterable[str]) -> List[str]:
        cleaned = [line.strip() for line in lines if line.strip()]
        joined: List[str] = []
        index = 0
        while index < len(cleaned):
            current = cleaned[index]
            following = cleaned[index + 1] if index + 1 < len(cleaned) else None
            if (
                following is not None
                and not CURRENCY_IN_LINE.search(current)
                and not self.is_skip_line(current)
                and not self.is_skip_line(following)
                and AMOUNT_LINE.search(following)
            ):
                joined.append(f"{current} {following}")
                index += 2
                continue
            joined.append(current)
            index += 1
        return joined

    def _valid_store(self, store: str) -> bool:
        return len(store) > 2 and not store.isdigit()

    def extract(self, text: str) -> List[OfferLine]:
        offers: List[OfferLine] = []
        for line in self.join_wrapped_lines(text.splitlines()):
            if self.is_skip_line(line):
                continue
            match = OFFER_PATTERN.match(line)
            if not match:
                continue
            store = match.group("store").strip().rstrip("-–—:").strip()
            if not self._valid_store(store):
                continue
            offers.append(OfferLine(store=store, total_earnings=parse_currency(match.group("amount"))))
        return offers
