from pathlib import Path
import sys

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from earnings_ocr.models.parsed_record import OfferLine
from earnings_ocr.services.offers import OfferReconstructor
from earnings_ocr.services.parser import ParserService


def test_single_line_offer_with_checkmark_glyph() -> None:
    offers = OfferReconstructor().extract("Taco Bell v $14.40")
    assert offers == [OfferLine(store="Taco Bell", total_earnings=14.40)]


def test_wrapped_amount_line_is_joined_to_store() -> None:
    text = "Taco Bell - 031435, Taco Bell - 031435\nv $14.40"
    offers = OfferReconstructor().extract(text)
    assert len(offers) == 1
    assert offers[0].store == "Taco Bell - 031435, Taco Bell - 031435"
    assert offers[0].total_earnings == pytest.approx(14.40)


def test_wrapped_store_suffix_is_kept() -> None:
    offers = OfferReconstructor().extract("Panda Express\n- 1182 v $9.50")
    assert offers == [OfferLine(store="Panda Express - 1182", total_earnings=9.50)]


def test_join_wrapped_lines_drops_blanks_and_respects_headers() -> None:
    reconstructor = OfferReconstructor()
    joined = reconstructor.join_wrapped_lines(
        ["  Chipotle  ", "", "$11.20", "7 deliveries", "Wendy's v $12.75", "Customer tips", "$3.00"]
    )
    assert joined == ["Chipotle $11.20", "7 deliveries", "Wendy's v $12.75", "Customer tips", "$3.00"]


def test_header_and_summary_lines_are_not_offers() -> None:
    text = "\n".join(
        [
            "Sat, Mar 8",
            "Start Time 5:02 PM",
            "Total Time 4h 45m",
            "$96.50",
            "DoorDash pay $61.25",
            "Customer tips $35.25",
            "Offers 9",
            "7 deliveries",
            "Wendy's v $12.75",
            "12 $4.00",
        ]
    )
    offers = OfferReconstructor().extract(text)
    assert [offer.store for offer in offers] == ["Wendy's"]


@pytest.mark.parametrize(
    "line, store, amount",
    [
        ("McDonald's ✓ $8.25", "McDonald's", 8.25),
        ("Burger King y $1,024.00", "Burger King", 1024.00),
        ("Subway: $6.75)", "Subway", 6.75),
        ("Starbucks 5.50", "Starbucks", 5.50),
    ],
)
def test_offer_line_variants(line: str, store: str, amount: float) -> None:
    offers = OfferReconstructor().extract(line)
    assert len(offers) == 1
    assert offers[0].store == store
    assert offers[0].total_earnings == pytest.approx(amount)


def test_is_skip_line() -> None:
    reconstructor = OfferReconstructor()
    assert reconstructor.is_skip_line("Active Time 1h 30m")
    assert reconstructor.is_skip_line("Tuesday, Feb 10")
    assert reconstructor.is_skip_line("3 completed deliveries")
    assert not reconstructor.is_skip_line("Wendy's v $12.75")
    assert not reconstructor.is_skip_line("Sunoco v $4.00")


def test_label_lines_are_never_joined_onto_a_header() -> None:
    reconstructor = OfferReconstructor()
    lines = ["Pay breakdown", "DoorDash pay $61.25", "Customer tips $35.25", "Wendy's v $12.75"]
    assert reconstructor.join_wrapped_lines(lines) == lines
    offers = reconstructor.extract("\n".join(lines))
    assert offers == [OfferLine(store="Wendy's", total_earnings=12.75)]


def test_pay_lines_stay_out_of_parsed_offers() -> None:
    text = "Sat, Mar 8\nPay breakdown\nDoorDash pay $61.25\nCustomer tips $35.25\nWendy's v $12.75"
    day = ParserService(year=2025).parse(text).day
    assert day is not None
    assert day.base_pay == pytest.approx(61.25)
    assert day.tips == pytest.approx(35.25)
    assert [offer.store for offer in day.offers] == ["Wendy's"]


def test_store_number_wrapped_onto_amount_line() -> None:
    reconstructor = OfferReconstructor()
    lines = ["Taco Bell - 031435, Taco Bell", "- 031435 v $14.40"]
    assert reconstructor.join_wrapped_lines(lines) == ["Taco Bell - 031435, Taco Bell - 031435 v $14.40"]
    offers = reconstructor.extract("\n".join(lines))
    assert offers == [OfferLine(store="Taco Bell - 031435, Taco Bell - 031435", total_earnings=14.40)]
