"""Locate the item region and the declared total on a receipt."""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from kassa.domain.errors import SectionNotFoundError

from .numbers import find_number_candidates

# Generic fiscal receipt anchors (Kazakh / Russian / English)
ITEMS_START_PATTERN = re.compile(r"САТУ|ПРОДАЖА|SALE|Состав\s*чека", re.IGNORECASE)
ITEMS_END_PATTERN = re.compile(r"ЖИЫНЫ|ИТОГО|TOTAL|Карта|Card|Наличными|Kaspi|Бонусов", re.IGNORECASE)
TOTAL_LINE_PATTERN = re.compile(r"ИТОГО|Карта|Total", re.IGNORECASE)


@dataclass(frozen=True)
class SectionBounds:
    """Item region is lines[items_start + 1 : items_end]."""

    items_start: int
    items_end: int
    declared_total: Decimal


def _first_match(lines: Sequence[str], pattern: re.Pattern[str], start: int = 0) -> int | None:
    for index in range(start, len(lines)):
        if pattern.search(lines[index]):
            return index
    return None


def extract_declared_total(
    lines: Sequence[str],
    start: int,
    pattern: re.Pattern[str] = TOTAL_LINE_PATTERN,
) -> Decimal:
    """Largest number on any total/card line from ``start`` to the end of the receipt."""
    declared = Decimal("0")
    for line in lines[start:]:
        if not pattern.search(line):
            continue
        candidates = find_number_candidates(line)
        if candidates:
            declared = max(declared, max(candidates))
    return declared


def locate_sections(
    lines: Sequence[str],
    start_pattern: re.Pattern[str] = ITEMS_START_PATTERN,
    end_pattern: re.Pattern[str] = ITEMS_END_PATTERN,
    total_pattern: re.Pattern[str] = TOTAL_LINE_PATTERN,
) -> SectionBounds:
    """
    Find the item region anchors.

    The end anchor is the first end-pattern line after the start anchor.
    The declared total scan continues past the end anchor because payment
    lines ("Карта ...") often follow it.

    Raises:
        SectionNotFoundError: Either anchor is missing.
    """
    raw_text = "\n".join(lines)
    start = _first_match(lines, start_pattern)
    if start is None:
        raise SectionNotFoundError("Items start anchor not found", raw_text=raw_text)

    end = _first_match(lines, end_pattern, start + 1)
    if end is None:
        raise SectionNotFoundError("Items end anchor not found", raw_text=raw_text)

    return SectionBounds(
        items_start=start,
        items_end=end,
        declared_total=extract_declared_total(lines, end, total_pattern),
    )
