"""Group item-region lines into per-product blocks."""

import re
from collections.abc import Sequence

from kassa.domain.receipt import ItemBlock

ORDINAL_PATTERN = re.compile(r"^\s*\d+\.\s+")
# "2 x 450", "1,5 х 1 200" (Cyrillic x), "3*99", "2 × 150"
QUANTITY_MARKER_PATTERN = re.compile(r"(\d+(?:[.,]\d+)?)\s*[xх*×]\s*\d", re.IGNORECASE)


def has_quantity_marker(line: str) -> bool:
    return QUANTITY_MARKER_PATTERN.search(line) is not None


def assemble_blocks(lines: Sequence[str], open_on_quantity: bool = True) -> list[ItemBlock]:
    """
    Split item lines into blocks.

    A block opens on an ordinal line ("3. Хлеб") or, when ``open_on_quantity``
    is set, on a quantity marker line that cannot belong to the open block
    (none open yet, or the open block already has its marker). Any other
    line continues the open block. Lines before the first block are OCR
    preamble and are discarded.
    """
    blocks: list[ItemBlock] = []
    current: ItemBlock | None = None

    for raw_line in lines:
        line = raw_line.strip()
        if not line:
            continue

        ordinal = ORDINAL_PATTERN.match(line)
        if ordinal:
            rest = line[ordinal.end() :].strip()
            marker = QUANTITY_MARKER_PATTERN.search(rest)
            if marker:
                current = ItemBlock(
                    name_hint=rest[: marker.start()].strip(),
                    raw_lines=[rest],
                    has_quantity_marker=True,
                )
            else:
                current = ItemBlock(name_hint=rest)
            blocks.append(current)
            continue

        marker = QUANTITY_MARKER_PATTERN.search(line)
        if marker:
            if open_on_quantity and (current is None or current.has_quantity_marker):
                current = ItemBlock(name_hint=line[: marker.start()].strip())
                blocks.append(current)
            if current is not None:
                current.raw_lines.append(line)
                current.has_quantity_marker = True
            continue

        if current is not None:
            current.raw_lines.append(line)

    return blocks
