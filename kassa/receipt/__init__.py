"""Pure receipt parsing: OCR word boxes -> lines -> blocks -> priced items."""

from kassa.receipt.line_reconstruction import reconstruct_lines
from kassa.receipt.ocr_result_parser import parse_receipt_lines, parse_word_boxes

__all__ = [
    "reconstruct_lines",
    "parse_receipt_lines",
    "parse_word_boxes",
]
