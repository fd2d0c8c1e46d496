from decimal import Decimal

from kassa.domain.receipt import ReceiptItem, ReceiptResult
from kassa.domain.transaction import CategoryGroup, FinalizedReceipt, TransactionIntent
from kassa.receipt.date_utils import display_date, parse_numeric_date, parse_russian_long_date
from kassa.receipt.formatter import (
    format_amount,
    format_item_prompt,
    format_parsed_receipt,
    format_receipt_comment,
    format_receipt_report,
)


def _receipt(**overrides) -> ReceiptResult:
    fields = dict(
        shop_name="Magnum - Abay",
        address="ул. Abay 1",
        date="2025-03-14T18:42:00",
        items=(ReceiptItem("Хлеб_белый", Decimal("1200")),),
        declared_total=Decimal("1200"),
        computed_total=Decimal("1200"),
    )
    fields.update(overrides)
    return ReceiptResult(**fields)


def test_format_amount_groups_thousands_and_rounds_half_up() -> None:
    assert format_amount(Decimal("12500")) == "12 500 T"
    assert format_amount(Decimal("99.5")) == "100 T"
    assert format_amount(None) == "0 T"


def test_item_prompt_escapes_markdown() -> None:
    receipt = _receipt()

    prompt = format_item_prompt(receipt, receipt.items[0])

    assert "*Magnum - Abay*" in prompt
    assert "Товар: *Хлеб\\_белый*" in prompt
    assert "Цена: 1 200 T" in prompt


def test_receipt_comment_truncates_names() -> None:
    items = [ReceiptItem("Молоко ультрапастеризованное", Decimal("1")), ReceiptItem("Кефир", Decimal("1"))]

    comment = format_receipt_comment("SMALL", items)

    assert comment.startswith("Чек SMALL: Молоко")
    assert comment.endswith("...")
    assert len(comment) == len("Чек SMALL: ") + 30 + len("...")
    assert format_receipt_comment("SMALL", items[1:], "ул. Абая 10") == "Чек SMALL: Кефир... (ул. Абая 10)"


def test_receipt_report_lists_groups_and_warning() -> None:
    receipt = _receipt(total_mismatch_warning="⚠️ Проверьте чек!")
    groups = (CategoryGroup("Прочая еда", receipt.items),)

    report = format_receipt_report(FinalizedReceipt(receipt=receipt, groups=groups, intents=()))

    assert report.splitlines()[0] == "*Чек из Magnum - Abay* (14.03.2025)"
    assert "⚠️ Проверьте чек!" in report
    assert report.endswith("- Прочая еда: 1 200 T")


def test_receipt_report_uses_recorded_date_when_receipt_has_none() -> None:
    receipt = _receipt(date=None)
    groups = (CategoryGroup("Прочая еда", receipt.items),)
    intent = TransactionIntent(
        type="expense", amount=Decimal("1200"), category="Прочая еда", tag="Еда", comment="", date="2025-04-01T10:00:00"
    )

    report = format_receipt_report(FinalizedReceipt(receipt=receipt, groups=groups, intents=(intent,)))

    assert report.splitlines() == [
        "*Чек из Magnum - Abay* (01.04.2025)",
        "Адрес: ул. Abay 1",
        "",
        "- Прочая еда: 1 200 T",
    ]


def test_parsed_receipt_dump_for_cli() -> None:
    dump = format_parsed_receipt(_receipt(date=None, unresolved_blocks=("Пакет",)))

    assert "Дата: -" in dump
    assert "ИТОГО по чеку: 1 200 T" in dump
    assert dump.endswith("Не удалось определить цену: Пакет")


def test_date_parsing_helpers() -> None:
    assert parse_numeric_date("Дата: 2025-03-14 09:05:30") == "2025-03-14T09:05:30"
    assert parse_numeric_date("14.03.2025") == "2025-03-14T00:00:00"
    assert parse_numeric_date("31.02.2025") is None
    assert parse_russian_long_date("1 мая 2024 г. в 07:15") == "2024-05-01T07:15:00"
    assert display_date("2025-03-14T18:42:00") == "14.03.2025"
    assert display_date(None) == "-"
