"""Receipt layout variants: generic fiscal receipts and shop-specific overrides."""

from __future__ import annotations

import re
from collections.abc import Sequence
from decimal import Decimal

from kassa.domain.errors import SectionNotFoundError
from kassa.domain.receipt import ItemBlock, ReceiptHeader, ReceiptItem

from .date_utils import RU_LONG_DATE_PATTERN, parse_russian_long_date
from .ocr_parser.blocks import ORDINAL_PATTERN, assemble_blocks
from .ocr_parser.common import SIGNATURE_WINDOW
from .ocr_parser.fields_parser import ADDRESS_MARKER_PATTERN, clean_address, extract_generic_header
from .ocr_parser.numbers import parse_number
from .ocr_parser.prices import DEFAULT_PRICE_STRATEGIES, PriceStrategy, resolve_block, tenge_suffix_price
from .ocr_parser.sections import (
    ITEMS_END_PATTERN,
    ITEMS_START_PATTERN,
    TOTAL_LINE_PATTERN,
    SectionBounds,
    locate_sections,
)


class ReceiptLayout:
    """
    Generic fiscal receipt layout.

    Subclasses override the anchors, block rule or price cascade for shops
    that print a fixed, known format.
    """

    name = "generic"
    start_pattern: re.Pattern[str] = ITEMS_START_PATTERN
    end_pattern: re.Pattern[str] = ITEMS_END_PATTERN
    total_pattern: re.Pattern[str] = TOTAL_LINE_PATTERN
    price_strategies: tuple[PriceStrategy, ...] = DEFAULT_PRICE_STRATEGIES

    def matches(self, lines: Sequence[str]) -> bool:
        return True

    def extract_header(self, lines: Sequence[str]) -> ReceiptHeader:
        return extract_generic_header(lines)

    def locate_sections(self, lines: Sequence[str]) -> SectionBounds:
        return locate_sections(lines, self.start_pattern, self.end_pattern, self.total_pattern)

    def assemble_blocks(self, lines: Sequence[str]) -> list[ItemBlock]:
        # Quantity markers only open blocks when the receipt does not number its items.
        numbered = any(ORDINAL_PATTERN.match(line) for line in lines)
        return assemble_blocks(lines, open_on_quantity=not numbered)

    def resolve_prices(self, blocks: Sequence[ItemBlock]) -> tuple[list[ReceiptItem], list[ItemBlock]]:
        """Return (resolved items, unresolved blocks) in receipt order."""
        items: list[ReceiptItem] = []
        unresolved: list[ItemBlock] = []
        for block in blocks:
            item = resolve_block(block, self.price_strategies)
            if item is None:
                unresolved.append(block)
            else:
                items.append(item)
        return items, unresolved


GenericLayout = ReceiptLayout


class MagnumLayout(ReceiptLayout):
    """Magnum app receipt screenshots: no ordinals, prices printed as "<N> тг"."""

    name = "magnum"
    signature = re.compile(r"Magnum\s*(?:Super)?", re.IGNORECASE)
    start_pattern = re.compile(r"Состав\s*чека", re.IGNORECASE)
    end_pattern = re.compile(r"Итого:", re.IGNORECASE)
    price_strategies = (tenge_suffix_price, *DEFAULT_PRICE_STRATEGIES)

    DEFAULT_SHOP_NAME = "Magnum Super"
    _BRANCH_PATTERN = re.compile(r"Magnum\s*-\s*(.*)", re.IGNORECASE)
    _PURCHASE_TOTAL_PATTERN = re.compile(r"Покупка\s*на\s*сумму\s*(\d[\d ]*)\s*тг", re.IGNORECASE)
    _ITOGO_TOTAL_PATTERN = re.compile(r"Итого:\s*(\d[\d ]*)\s*тг", re.IGNORECASE)

    def matches(self, lines: Sequence[str]) -> bool:
        return any(self.signature.search(line) for line in lines[:SIGNATURE_WINDOW])

    def extract_header(self, lines: Sequence[str]) -> ReceiptHeader:
        shop_name = self.DEFAULT_SHOP_NAME
        for line in lines:
            branch = self._BRANCH_PATTERN.search(line)
            if branch and branch.group(1).strip():
                shop_name = f"Magnum - {branch.group(1).strip()}"
                break

        address = ""
        header_end = next((i for i, line in enumerate(lines) if self.start_pattern.search(line)), len(lines))
        header = [line for line in lines[:header_end] if not RU_LONG_DATE_PATTERN.search(line)]
        for index, line in enumerate(header):
            if ADDRESS_MARKER_PATTERN.search(line):
                # Street and house number usually wrap onto the next line
                address = clean_address(" ".join(header[index : index + 2]))
                break

        return ReceiptHeader(
            shop_name=shop_name,
            address=address,
            date=parse_russian_long_date("\n".join(lines)),
        )

    def _declared_total(self, text: str) -> Decimal:
        for pattern in (self._PURCHASE_TOTAL_PATTERN, self._ITOGO_TOTAL_PATTERN):
            match = pattern.search(text)
            if match:
                value = parse_number(match.group(1))
                if value is not None:
                    return value
        return Decimal("0")

    def locate_sections(self, lines: Sequence[str]) -> SectionBounds:
        raw_text = "\n".join(lines)
        start = next((i for i, line in enumerate(lines) if self.start_pattern.search(line)), None)
        end = next((i for i, line in enumerate(lines) if self.end_pattern.search(line)), None)
        if start is None or end is None or start >= end:
            raise SectionNotFoundError("Items region not found (Состав чека / Итого)", raw_text=raw_text)
        return SectionBounds(items_start=start, items_end=end, declared_total=self._declared_total(raw_text))

    def assemble_blocks(self, lines: Sequence[str]) -> list[ItemBlock]:
        return assemble_blocks(lines, open_on_quantity=True)


KNOWN_LAYOUTS: tuple[ReceiptLayout, ...] = (MagnumLayout(),)
DEFAULT_LAYOUT = ReceiptLayout()


def select_layout(
    lines: Sequence[str],
    layouts: Sequence[ReceiptLayout] = KNOWN_LAYOUTS,
) -> ReceiptLayout:
    """Return the first shop layout whose signature appears, else the generic layout."""
    for layout in layouts:
        if layout.matches(lines):
            return layout
    return DEFAULT_LAYOUT
