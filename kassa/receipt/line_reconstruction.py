"""Rebuild text lines from word-level OCR bounding boxes."""

from collections.abc import Sequence

from kassa.domain.receipt import WordBox

Y_TOLERANCE = 20  # Max vertical distance (pixels) between words on one row


def _close_line(words: list[WordBox]) -> str:
    ordered = sorted(words, key=lambda w: w.left)
    return " ".join(w.text for w in ordered)


def reconstruct_lines(
    words: Sequence[WordBox],
    y_tolerance: float = Y_TOLERANCE,
    skip_first: bool = True,
) -> list[str]:
    """
    Group OCR words into reading-order text lines.

    Words are sorted by their top edge; a word joins the current line while its
    top stays within ``y_tolerance`` of the first word on that line. Each line
    is then ordered left to right and joined with single spaces.

    Args:
        words: Word boxes as returned by the OCR oracle.
        y_tolerance: Row grouping tolerance in the oracle's pixel units.
        skip_first: Drop element 0, which the oracle uses for the full-text blob.

    Returns:
        Lines in top-to-bottom order.
    """
    candidates = list(words[1:] if skip_first else words)
    if not candidates:
        return []

    candidates.sort(key=lambda w: w.top)

    lines: list[str] = []
    current: list[WordBox] = []
    reference_y = 0.0
    for word in candidates:
        if current and abs(word.top - reference_y) < y_tolerance:
            current.append(word)
            continue
        if current:
            lines.append(_close_line(current))
        current = [word]
        reference_y = word.top

    if current:
        lines.append(_close_line(current))
    return lines
