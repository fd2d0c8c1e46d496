"""Numeric candidate extraction with stuck-digit repair."""

import re
from decimal import Decimal, InvalidOperation

# "1 200", "312 624", "12 500,50"
SPACED_NUMBER_PATTERN = re.compile(r"(?<![\d.,])\d{1,3}(?: \d{3})+(?:[.,]\d+)?(?!\d)")
NUMBER_TOKEN_PATTERN = re.compile(r"\d+(?:[.,]\d+)?")
# Reading-order scan used by the positional price fallback
ORDERED_NUMBER_PATTERN = re.compile(r"\d{1,3}(?: \d{3})+(?:[.,]\d+)?|\d+(?:[.,]\d+)?")

# Below this, concatenated OCR digits cannot be told apart from real amounts.
REPAIR_THRESHOLD = Decimal("100000")
REPAIR_TOLERANCE = Decimal("5")


def parse_number(raw: str) -> Decimal | None:
    """Parse an OCR number, ignoring grouping spaces and reading comma as decimal point."""
    cleaned = re.sub(r"\s+", "", raw).replace(",", ".")
    if not cleaned:
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def _digit_string(value: Decimal) -> str:
    return format(value.normalize(), "f")


def _repair(value: Decimal, raw: str) -> tuple[Decimal, bool]:
    """Return the repaired value and whether the last-chunk fallback was used."""
    if value < REPAIR_THRESHOLD:
        return value, False

    digits = _digit_string(value)

    # Exact doubling: 240240 -> 240, 22452245 -> 2245
    if len(digits) % 2 == 0:
        half = len(digits) // 2
        if digits[:half] == digits[half:]:
            parsed = parse_number(digits[:half])
            if parsed is not None:
                return parsed, False

    # Sticky tail: 2245224 -> 2245
    mid = (len(digits) + 1) // 2
    head, tail = digits[:mid], digits[mid:]
    head_value = parse_number(head)
    tail_value = parse_number(tail)
    if head_value is not None and tail_value is not None:
        if head.startswith(tail) or abs(head_value - tail_value) < REPAIR_TOLERANCE:
            return head_value, False

    if " " in raw:
        last_chunk = parse_number(raw.split(" ")[-1])
        if last_chunk is not None:
            return last_chunk, True

    return value, False


def repair_stuck_number(value: Decimal, raw: str) -> Decimal:
    """
    Undo common OCR digit concatenation artifacts.

    Only values of at least REPAIR_THRESHOLD are touched. Strategies in order:
    identical halves, a prefix that starts with (or is within 5 of) the
    remaining suffix, then the last space-delimited chunk of ``raw``.

    Args:
        value: Parsed numeric value.
        raw: Matched OCR text the value was parsed from.

    Returns:
        The repaired value, or ``value`` unchanged.
    """
    repaired, _ = _repair(value, raw)
    return repaired


def find_number_candidates(text: str) -> list[Decimal]:
    """
    Return every plausible number in ``text``.

    Space-grouped thousands come first, followed by every standalone numeric
    token. When a grouped number only survives repair through its last chunk,
    both readings are kept ("312 624" yields 624 and 312624).
    """
    candidates: list[Decimal] = []

    for match in SPACED_NUMBER_PATTERN.finditer(text):
        raw = match.group(0)
        value = parse_number(raw)
        if value is None:
            continue
        repaired, used_last_chunk = _repair(value, raw)
        candidates.append(repaired)
        if used_last_chunk:
            candidates.append(value)

    for match in NUMBER_TOKEN_PATTERN.finditer(text):
        value = parse_number(match.group(0))
        if value is None:
            continue
        candidates.append(repair_stuck_number(value, match.group(0)))

    return candidates


def iter_ordered_numbers(text: str) -> list[tuple[Decimal, str]]:
    """Return (value, raw) pairs in reading order, grouped thousands kept whole."""
    numbers: list[tuple[Decimal, str]] = []
    for match in ORDERED_NUMBER_PATTERN.finditer(text):
        value = parse_number(match.group(0))
        if value is not None:
            numbers.append((value, match.group(0)))
    return numbers
