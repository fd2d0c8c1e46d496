"""Price resolution cascade and item name cleanup for item blocks."""

import re
from collections import Counter
from collections.abc import Callable, Sequence
from decimal import Decimal

from kassa.domain.receipt import ItemBlock, ReceiptItem

from .blocks import has_quantity_marker
from .numbers import find_number_candidates, iter_ordered_numbers, parse_number, repair_stuck_number

PriceStrategy = Callable[[ItemBlock], Decimal | None]

# qty x unit price; the unit segment may carry grouped thousands ("1 x 1 200")
FORMULA_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*[xх*×]\s*(\d[\d .,]*)", re.IGNORECASE)
# A digit right after a quantity marker ("1 x 1 520 тг") is the unit count, not the price.
TENGE_PRICE_PATTERN = re.compile(
    r"(?<![\d.,])(?<![xх*×]\s)(?<![xх*×])(\d{1,3}(?: \d{3})+(?:[.,]\d+)?|\d+(?:[.,]\d+)?)\s*(?:тг|₸)",
    re.IGNORECASE,
)

FORMULA_TOLERANCE = Decimal("5")
SINGLE_QUANTITY_TOLERANCE = Decimal("0.01")
NOISE_FLOOR = Decimal("5")
MAX_PLAUSIBLE_PRICE = Decimal("1000000")

# Fiscal receipt detail rows that never belong to a product name
LABEL_LINE_PATTERN = re.compile(
    r"^(Стоимость|НДС|ҚҚС|Скидка|Цена|Сумма|Кол-во|Количество|Штрих|Бонус)",
    re.IGNORECASE,
)
_LETTER_PATTERN = re.compile(r"[^\W\d_]")
_TRAILING_NUMBERS_PATTERN = re.compile(r"(?:\s+\d+(?:[.,]\d+)?)+$")
_CURRENCY_TOKEN_PATTERN = re.compile(r"(?<!\w)(?:тг|₸)(?!\w)", re.IGNORECASE)


def _quantity_lines(block: ItemBlock) -> list[tuple[Decimal, str]]:
    """Return (quantity, raw unit price text) for every formula line in the block."""
    formulas: list[tuple[Decimal, str]] = []
    for line in block.raw_lines:
        match = FORMULA_PATTERN.search(line)
        if not match:
            continue
        quantity = parse_number(match.group(1))
        if quantity is None:
            continue
        formulas.append((quantity, match.group(2).strip(" .,")))
    return formulas


def _is_single_quantity(quantity: Decimal) -> bool:
    return abs(quantity - 1) < SINGLE_QUANTITY_TOLERANCE


def formula_price(block: ItemBlock) -> Decimal | None:
    """Match qty * unit price against the numbers printed in the block."""
    block_candidates = find_number_candidates(block.text)
    for quantity, unit_raw in _quantity_lines(block):
        for unit_price in find_number_candidates(unit_raw):
            expected = quantity * unit_price
            for candidate in block_candidates:
                if abs(candidate - expected) <= FORMULA_TOLERANCE:
                    return candidate
            if _is_single_quantity(quantity):
                return unit_price
    return None


def duplicate_price(block: ItemBlock) -> Decimal | None:
    """Pick the most repeated number above the noise floor, largest on ties."""
    counts = Counter(find_number_candidates(block.text))
    repeated = [(count, value) for value, count in counts.items() if count >= 2 and value > NOISE_FLOOR]
    if not repeated:
        return None
    return max(repeated)[1]


def _unit_prices(block: ItemBlock) -> list[Decimal]:
    """Unit prices of multi-quantity formula lines; never the line total."""
    units: list[Decimal] = []
    for quantity, unit_raw in _quantity_lines(block):
        if _is_single_quantity(quantity):
            continue
        candidates = find_number_candidates(unit_raw)
        if candidates:
            units.append(candidates[0])
    return units


def positional_price(block: ItemBlock) -> Decimal | None:
    """Take the last plausible number in reading order."""
    unit_prices = _unit_prices(block)
    for value, raw in reversed(iter_ordered_numbers(block.text)):
        candidate = repair_stuck_number(value, raw)
        if any(abs(candidate - unit) < Decimal("0.1") for unit in unit_prices):
            continue
        if NOISE_FLOOR < candidate < MAX_PLAUSIBLE_PRICE:
            return candidate
    return None


def tenge_suffix_price(block: ItemBlock) -> Decimal | None:
    """First amount printed with a tenge suffix ("450 тг"), searched line by line."""
    for line in block.raw_lines:
        match = TENGE_PRICE_PATTERN.search(line)
        if not match:
            continue
        value = parse_number(match.group(1))
        if value is not None and value > 0:
            return value
    return None


DEFAULT_PRICE_STRATEGIES: tuple[PriceStrategy, ...] = (
    formula_price,
    duplicate_price,
    positional_price,
)


def resolve_price(
    block: ItemBlock,
    strategies: Sequence[PriceStrategy] = DEFAULT_PRICE_STRATEGIES,
) -> Decimal | None:
    """Return the first price any strategy resolves, or None."""
    for strategy in strategies:
        price = strategy(block)
        if price is not None and price > 0:
            return price
    return None


def _price_pattern(price: Decimal) -> str:
    plain = format(price.normalize(), "f")
    whole, _, fraction = plain.partition(".")
    grouped = f"{int(whole):,}".replace(",", " ")
    body = "|".join(re.escape(v) for v in sorted({whole, grouped}, key=len, reverse=True))
    suffix = rf"[.,]{fraction}0*" if fraction else r"(?:[.,]0+)?"
    return rf"(?<![\d.,])(?:{body}){suffix}(?!\d)\s*(?:тг|₸)?"


def _strip_price(text: str, price: Decimal) -> str:
    return re.sub(_price_pattern(price), " ", text, flags=re.IGNORECASE)


def extract_item_name(block: ItemBlock, price: Decimal) -> str:
    """
    Build a product name from the block's name hint and continuation lines.

    Formula rows and receipt label rows are skipped; the resolved price,
    currency tokens and trailing bare numbers are removed.
    """
    parts = [block.name_hint]
    for line in block.raw_lines:
        if has_quantity_marker(line) or LABEL_LINE_PATTERN.match(line):
            continue
        if _LETTER_PATTERN.search(line):
            parts.append(line)

    name = " ".join(part for part in parts if part)
    name = _strip_price(name, price)
    name = _CURRENCY_TOKEN_PATTERN.sub(" ", name)
    name = re.sub(r"\s+", " ", name).strip()
    name = _TRAILING_NUMBERS_PATTERN.sub("", name)
    name = name.strip(" ,;:-")
    return name or block.name_hint or "Товар"


def resolve_block(
    block: ItemBlock,
    strategies: Sequence[PriceStrategy] = DEFAULT_PRICE_STRATEGIES,
) -> ReceiptItem | None:
    """Resolve a block into a priced item; None when no strategy finds a price."""
    price = resolve_price(block, strategies)
    if price is None:
        return None
    return ReceiptItem(name=extract_item_name(block, price), price=price)
