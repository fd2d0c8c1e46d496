from decimal import Decimal

from kassa.receipt.ocr_parser.numbers import (
    find_number_candidates,
    iter_ordered_numbers,
    parse_number,
    repair_stuck_number,
)


def test_prefix_repair_of_stuck_digits() -> None:
    assert Decimal("2245") in find_number_candidates("2245224")


def test_exact_halves_repair() -> None:
    assert Decimal("240") in find_number_candidates("240240")


def test_spaced_group_keeps_grouped_value_and_last_chunk() -> None:
    candidates = find_number_candidates("312 624")

    assert Decimal("312624") in candidates
    assert Decimal("624") in candidates


def test_spaced_thousands_below_threshold_are_one_number() -> None:
    candidates = find_number_candidates("Хлеб 1 200")

    assert candidates[0] == Decimal("1200")


def test_small_values_are_not_repaired() -> None:
    assert repair_stuck_number(Decimal("99999"), "99999") == Decimal("99999")
    assert repair_stuck_number(Decimal("450450"), "450450") == Decimal("450")


def test_close_halves_repair() -> None:
    # OCR misread of the repeated digit: head and tail differ by less than 5
    assert repair_stuck_number(Decimal("15021503"), "15021503") == Decimal("1502")


def test_parse_number_reads_comma_decimal_and_grouping() -> None:
    assert parse_number("1 250,50") == Decimal("1250.50")
    assert parse_number("") is None


def test_ordered_numbers_keep_reading_order() -> None:
    assert [value for value, _ in iter_ordered_numbers("2 x 1 200 = 2 400")] == [
        Decimal("2"),
        Decimal("1200"),
        Decimal("2400"),
    ]
