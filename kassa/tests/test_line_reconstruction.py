"""Tests for rebuilding text lines from word boxes."""

from conftest import box

from kassa.domain.receipt import WordBox
from kassa.receipt.line_reconstruction import reconstruct_lines

BLOB = WordBox(text="full text", vertices=())


def test_same_row_words_are_ordered_by_x_regardless_of_input_order() -> None:
    words = [BLOB, box("1200", 400, 102), box("Хлеб", 20, 100), box("белый", 120, 105)]

    assert reconstruct_lines(words) == ["Хлеб белый 1200"]


def test_rows_are_split_when_vertical_gap_exceeds_tolerance() -> None:
    words = [BLOB, box("ИТОГО", 20, 200), box("Молоко", 20, 100), box("450", 300, 110)]

    assert reconstruct_lines(words) == ["Молоко 450", "ИТОГО"]


def test_tolerance_is_measured_from_first_word_of_line() -> None:
    # 115 is within 20 of 100; 125 is within 20 of 115 but not of 100.
    words = [BLOB, box("a", 10, 100), box("b", 50, 115), box("c", 90, 125)]

    assert reconstruct_lines(words) == ["a b", "c"]


def test_first_element_is_full_text_blob_and_skipped() -> None:
    assert reconstruct_lines([BLOB]) == []
    assert reconstruct_lines([box("only", 0, 0)], skip_first=False) == ["only"]


def test_empty_input() -> None:
    assert reconstruct_lines([]) == []
