"""Parse OCR word boxes / text lines into structured ReceiptResult data."""

from collections.abc import Sequence
from decimal import Decimal

from kassa.domain.errors import OracleFailure
from kassa.domain.receipt import ReceiptResult, WordBox

from .layouts import KNOWN_LAYOUTS, ReceiptLayout, select_layout
from .line_reconstruction import reconstruct_lines
from .ocr_parser.common import total_mismatch_warning


def parse_receipt_lines(
    lines: Sequence[str],
    *,
    strict: bool = False,
    layouts: Sequence[ReceiptLayout] = KNOWN_LAYOUTS,
) -> ReceiptResult:
    """
    Parse reconstructed receipt lines.

    Blocks whose price cannot be resolved are dropped; the gap only shows up
    through the total mismatch warning. With ``strict`` the dropped blocks'
    names are also listed in ``unresolved_blocks``.

    Args:
        lines: Receipt text lines in reading order.
        strict: Report unresolved blocks individually.
        layouts: Shop-specific layouts to try before the generic one.

    Returns:
        Parsed receipt.

    Raises:
        OracleFailure: No text at all.
        SectionNotFoundError: Item region anchors are missing.
    """
    lines = [line for line in lines if line.strip()]
    if not lines:
        raise OracleFailure("OCR returned no text")

    layout = select_layout(lines, layouts)
    header = layout.extract_header(lines)
    bounds = layout.locate_sections(lines)
    blocks = layout.assemble_blocks(lines[bounds.items_start + 1 : bounds.items_end])
    items, unresolved = layout.resolve_prices(blocks)

    computed_total = sum((item.price for item in items), Decimal("0"))
    return ReceiptResult(
        shop_name=header.shop_name,
        address=header.address,
        date=header.date,
        items=tuple(items),
        declared_total=bounds.declared_total,
        computed_total=computed_total,
        raw_text="\n".join(lines),
        total_mismatch_warning=total_mismatch_warning(computed_total, bounds.declared_total),
        layout=layout.name,
        unresolved_blocks=tuple(block.name_hint or block.text for block in unresolved) if strict else (),
    )


def parse_word_boxes(
    words: Sequence[WordBox],
    *,
    strict: bool = False,
    layouts: Sequence[ReceiptLayout] = KNOWN_LAYOUTS,
) -> ReceiptResult:
    """Reconstruct lines from OCR word boxes (element 0 is the full-text blob) and parse them."""
    if not words:
        raise OracleFailure("OCR returned no annotations")
    return parse_receipt_lines(reconstruct_lines(words), strict=strict, layouts=layouts)
