"""Format receipts, prompts and reports as chat messages (Telegram Markdown)."""

from collections.abc import Sequence
from decimal import ROUND_HALF_UP, Decimal

from telegram.helpers import escape_markdown

from kassa.domain.receipt import ReceiptItem, ReceiptResult
from kassa.domain.transaction import FinalizedReceipt

from .date_utils import display_date

CURRENCY = "T"

ANALYZING_MESSAGE = "🔍 Анализирую чек..."
NO_ITEMS_MESSAGE = "Товары не найдены или ошибка."
OCR_FAILED_MESSAGE = "Не удалось распознать чек. Попробуйте сфотографировать ещё раз."
PHOTO_ERROR_MESSAGE = "Ошибка обработки фото."
INVALID_CATEGORY_MESSAGE = "Выберите категорию из кнопок."
CANCELLED_MESSAGE = "Отменено."
NO_RAW_TEXT_MESSAGE = "Нет сохраненного текста чека. Отправьте фото сначала."
SAVE_FAILED_MESSAGE = "Не удалось сохранить расход. Попробуйте ещё раз позже."
SHOW_RAW_BUTTON = "Показать сырой текст (Debug)"
COMMENT_PREVIEW_LENGTH = 30


def _md(text: str) -> str:
    return escape_markdown(text, version=1)


def format_amount(amount: Decimal | int | float | None) -> str:
    """Whole currency units with space-grouped thousands: 12500 -> "12 500 T"."""
    if amount is None:
        return f"0 {CURRENCY}"
    rounded = Decimal(str(amount)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    grouped = f"{int(rounded):,}".replace(",", " ")
    return f"{grouped} {CURRENCY}"


def format_item_prompt(receipt: ReceiptResult, item: ReceiptItem) -> str:
    """Ask the user for one item's category."""
    return (
        f"*{_md(receipt.shop_name)}*\n"
        f"Товар: *{_md(item.name)}*\n"
        f"Цена: {format_amount(item.price)}\n\n"
        "Категория?"
    )


def format_learned_ack(item_name: str, category: str) -> str:
    return f'Запомнил: "{_md(item_name)}" -> {category}'


def format_receipt_comment(shop_name: str, items: Sequence[ReceiptItem], address: str = "") -> str:
    """Transaction comment: "Чек <shop>: <first 30 chars of names>...( <address>)"."""
    names = ", ".join(item.name for item in items)
    address_suffix = f" ({address})" if address else ""
    return f"Чек {shop_name}: {names[:COMMENT_PREVIEW_LENGTH]}...{address_suffix}"


def format_unresolved_blocks(names: Sequence[str]) -> str:
    return "Не удалось определить цену: " + ", ".join(_md(name) for name in names)


def format_receipt_report(finalized: FinalizedReceipt) -> str:
    """Final per-category summary shown after the receipt is recorded."""
    receipt = finalized.receipt
    # Intents carry the fallback date when the receipt printed none
    date = finalized.intents[0].date if finalized.intents else receipt.date
    lines = [f"*Чек из {_md(receipt.shop_name)}* ({display_date(date)})"]
    if receipt.address:
        lines.append(f"Адрес: {_md(receipt.address)}")
    if receipt.total_mismatch_warning:
        lines.extend(["", receipt.total_mismatch_warning])
    if receipt.unresolved_blocks:
        lines.extend(["", format_unresolved_blocks(receipt.unresolved_blocks)])
    lines.append("")
    for group in finalized.groups:
        lines.append(f"- {group.category}: {format_amount(group.total)}")
    return "\n".join(lines)


def format_parsed_receipt(receipt: ReceiptResult) -> str:
    """Plain-text dump of a parsed receipt for the CLI."""
    lines = [
        f"Магазин: {receipt.shop_name}",
        f"Адрес: {receipt.address or '-'}",
        f"Дата: {display_date(receipt.date)}",
        f"Шаблон: {receipt.layout}",
        "",
    ]
    width = max((len(item.name) for item in receipt.items), default=0)
    for item in receipt.items:
        lines.append(f"  {item.name.ljust(width)}  {format_amount(item.price).rjust(12)}")
    lines.append("")
    lines.append(f"Сумма товаров: {format_amount(receipt.computed_total)}")
    lines.append(f"ИТОГО по чеку: {format_amount(receipt.declared_total)}")
    if receipt.total_mismatch_warning:
        lines.append(receipt.total_mismatch_warning)
    if receipt.unresolved_blocks:
        lines.append("Не удалось определить цену: " + ", ".join(receipt.unresolved_blocks))
    return "\n".join(lines)
