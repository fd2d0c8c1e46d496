"""Composable OCR receipt parser components."""

from .blocks import assemble_blocks, has_quantity_marker
from .common import format_plain_number, total_mismatch_warning
from .fields_parser import clean_address, extract_generic_header
from .numbers import find_number_candidates, repair_stuck_number
from .prices import (
    DEFAULT_PRICE_STRATEGIES,
    PriceStrategy,
    duplicate_price,
    extract_item_name,
    formula_price,
    positional_price,
    resolve_block,
    resolve_price,
    tenge_suffix_price,
)
from .sections import SectionBounds, extract_declared_total, locate_sections

__all__ = [
    "DEFAULT_PRICE_STRATEGIES",
    "PriceStrategy",
    "SectionBounds",
    "assemble_blocks",
    "clean_address",
    "duplicate_price",
    "extract_declared_total",
    "extract_generic_header",
    "extract_item_name",
    "find_number_candidates",
    "format_plain_number",
    "formula_price",
    "has_quantity_marker",
    "locate_sections",
    "positional_price",
    "repair_stuck_number",
    "resolve_block",
    "resolve_price",
    "tenge_suffix_price",
    "total_mismatch_warning",
]
