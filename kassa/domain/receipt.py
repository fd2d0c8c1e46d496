"""Data models for receipt scanning."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(frozen=True)
class WordBox:
    """A single OCR word with its four bounding-box corners."""

    text: str
    vertices: tuple[tuple[float, float], ...]

    @property
    def top(self) -> float:
        # The oracle reports corners clockwise starting at top-left.
        if not self.vertices:
            return 0.0
        return self.vertices[0][1]

    @property
    def left(self) -> float:
        if not self.vertices:
            return 0.0
        return self.vertices[0][0]


@dataclass
class ItemBlock:
    """Raw receipt lines believed to describe one product."""

    name_hint: str
    raw_lines: list[str] = field(default_factory=list)
    has_quantity_marker: bool = False

    @property
    def text(self) -> str:
        return " ".join(self.raw_lines)


@dataclass
class ReceiptItem:
    """A single priced line item on a receipt."""

    name: str
    price: Decimal
    category: str | None = None  # e.g. "Молочка"


@dataclass(frozen=True)
class ReceiptHeader:
    """Shop identity fields printed above the item list."""

    shop_name: str
    address: str
    date: str | None = None  # ISO-8601, None when the receipt prints no date


@dataclass(frozen=True)
class ReceiptResult:
    """Parsed receipt data."""

    shop_name: str
    address: str
    date: str | None
    items: tuple[ReceiptItem, ...]
    declared_total: Decimal
    computed_total: Decimal
    raw_text: str = ""  # Reconstructed OCR text for the debug view
    total_mismatch_warning: str | None = None
    layout: str = "generic"
    # Name hints of blocks no price strategy could resolve (strict mode only).
    unresolved_blocks: tuple[str, ...] = ()
