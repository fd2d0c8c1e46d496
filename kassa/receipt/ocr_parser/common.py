"""Shared constants and helpers for OCR receipt parsing."""

from decimal import Decimal

# Rounding slack between the item sum and the printed total
TOTAL_MISMATCH_TOLERANCE = Decimal("1")

# How many leading lines are inspected for a shop signature
SIGNATURE_WINDOW = 10


def format_plain_number(value: Decimal) -> str:
    """Render a Decimal without exponent or trailing zeros ("1200", "99.5")."""
    return format(value.normalize(), "f")


def total_mismatch_warning(computed_total: Decimal, declared_total: Decimal) -> str | None:
    """Return the user-facing warning when item prices do not add up to the printed total."""
    if declared_total <= 0:
        return None
    if abs(computed_total - declared_total) <= TOTAL_MISMATCH_TOLERANCE:
        return None
    return (
        f"⚠️ Сумма товаров ({format_plain_number(computed_total)}) не совпадает "
        f"с ИТОГО ({format_plain_number(declared_total)}). Проверьте чек!"
    )
