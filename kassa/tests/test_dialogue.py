"""Tests for the per-item receipt category dialogue."""

from decimal import Decimal

import pytest

from kassa.application.receipts.dialogue import ReceiptDialogueController
from kassa.application.receipts.finalize import finalize_receipt, group_items_by_category, record_finalized_receipt
from kassa.domain.receipt import ReceiptItem, ReceiptResult
from kassa.receipt.ocr_result_parser import parse_receipt_lines
from kassa.runtime.category_rules import load_category_vocabulary


def _receipt(*items: tuple[str, str], shop_name: str = "SMALL", date: str | None = "2025-03-14T18:42:00") -> ReceiptResult:
    receipt_items = tuple(ReceiptItem(name, Decimal(price)) for name, price in items)
    total = sum((item.price for item in receipt_items), Decimal("0"))
    return ReceiptResult(
        shop_name=shop_name,
        address="ул. Абая 10",
        date=date,
        items=receipt_items,
        declared_total=total,
        computed_total=total,
    )


def _run_to_completion(controller: ReceiptDialogueController, chat_id: int, receipt: ReceiptResult, answer: str):
    prompts = 0
    step = controller.start(chat_id, receipt)
    while step.state == "AWAITING_ITEM_CATEGORY":
        prompts += 1
        step = controller.handle_reply(chat_id, answer)
    return step, prompts


@pytest.mark.parametrize("known", [0, 1, 3])
def test_prompts_exactly_for_items_without_learned_category(learning_store, vocabulary, known: int) -> None:
    receipt = _receipt(("Молоко", "450"), ("Кефир", "300"), ("Чипсы", "600"))
    for item in receipt.items[:known]:
        learning_store.learn_product_category(item.name, "Молочка")
    controller = ReceiptDialogueController(learning_store, vocabulary)

    step, prompts = _run_to_completion(controller, 1, receipt, "Снеки")

    assert prompts == 3 - known
    assert step.state == "FINALIZED"
    assert not controller.has_session(1)


def test_prompt_order_skips_known_items(learning_store, vocabulary) -> None:
    learning_store.learn_product_category("Молоко", "Молочка")
    controller = ReceiptDialogueController(learning_store, vocabulary)

    step = controller.start(7, _receipt(("Молоко", "450"), ("Чипсы", "600")))

    assert step.state == "AWAITING_ITEM_CATEGORY"
    assert step.item is not None and step.item.name == "Чипсы"
    assert step.item_index == 1


def test_invalid_reply_asks_same_item_again(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)
    controller.start(1, _receipt(("Чипсы", "600")))

    step = controller.handle_reply(1, "Непонятно")

    assert step.state == "AWAITING_ITEM_CATEGORY"
    assert not step.accepted
    assert step.item is not None and step.item.name == "Чипсы"
    assert learning_store.lookup_product_category("Чипсы") is None


def test_reply_is_learned_with_hint_suffix_removed(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)
    controller.start(1, _receipt(("Поездка", "1500")))

    step = controller.handle_reply(1, "Такси (Яндекс)")

    assert step.state == "FINALIZED"
    assert step.learned == ("Поездка", "Такси")
    assert learning_store.lookup_product_category("поездка") == "Такси"


def test_cancel_discards_session_without_recording(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)
    controller.start(1, _receipt(("Чипсы", "600"), ("Сок", "400")))
    controller.handle_reply(1, "Снеки")

    step = controller.handle_reply(1, "Отмена")

    assert step.state == "CANCELLED"
    assert not controller.has_session(1)
    assert controller.handle_reply(1, "Снеки").state == "NO_SESSION"


def test_new_receipt_replaces_open_session(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)
    controller.start(1, _receipt(("Чипсы", "600")))

    step = controller.start(1, _receipt(("Сок", "400")))

    assert step.item is not None and step.item.name == "Сок"
    session = controller.session(1)
    assert session is not None and [item.name for item in session.items] == ["Сок"]


def test_sessions_are_independent_per_chat(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)
    controller.start(1, _receipt(("Чипсы", "600")))
    controller.start(2, _receipt(("Сок", "400")))

    assert controller.handle_reply(1, "Снеки").state == "FINALIZED"
    assert controller.has_session(2)


def test_shop_default_category_fills_unknown_items(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary, use_shop_defaults=True)

    step = controller.start(1, _receipt(("Аспирин", "900"), shop_name="Аптека №5"))

    assert step.state == "FINALIZED"
    assert step.finalized is not None
    assert [group.category for group in step.finalized.groups] == ["Медицина"]


def test_receipt_items_are_not_mutated(learning_store, vocabulary) -> None:
    receipt = _receipt(("Чипсы", "600"))
    controller = ReceiptDialogueController(learning_store, vocabulary)

    _run_to_completion(controller, 1, receipt, "Снеки")

    assert receipt.items[0].category is None


def test_finalize_groups_by_category_in_first_seen_order(vocabulary) -> None:
    receipt = _receipt(("Молоко", "450"), ("Чипсы", "600"), ("Кефир", "300"))
    items = [
        ReceiptItem("Молоко", Decimal("450"), "Молочка"),
        ReceiptItem("Чипсы", Decimal("600"), "Снеки"),
        ReceiptItem("Кефир", Decimal("300"), "Молочка"),
    ]

    finalized = finalize_receipt(receipt, items, vocabulary)

    assert [(group.category, group.total) for group in finalized.groups] == [
        ("Молочка", Decimal("750")),
        ("Снеки", Decimal("600")),
    ]
    first = finalized.intents[0]
    assert (first.type, first.amount, first.tag, first.date, first.source_account) == (
        "expense",
        Decimal("750"),
        "Еда",
        "2025-03-14T18:42:00",
        "Основной",
    )
    assert first.comment == "Чек SMALL: Молоко, Кефир... (ул. Абая 10)"


def test_finalize_without_printed_date_uses_current_time(vocabulary) -> None:
    receipt = _receipt(("Чипсы", "600"), date=None)

    finalized = finalize_receipt(receipt, [ReceiptItem("Чипсы", Decimal("600"), "Снеки")], vocabulary)

    assert finalized.intents[0].date


def test_group_items_requires_categories() -> None:
    with pytest.raises(ValueError):
        group_items_by_category([ReceiptItem("Чипсы", Decimal("600"))])


def test_record_finalized_receipt_writes_one_transaction_per_group(learning_store, vocabulary, recorder) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)
    learning_store.learn_product_category("Молоко", "Молочка")
    step, _ = _run_to_completion(controller, 1, _receipt(("Молоко", "450"), ("Чипсы", "600")), "Снеки")

    ids = record_finalized_receipt(step.finalized, recorder, user_id=1)

    assert len(ids) == 2
    assert [row.category for row in recorder.list_transactions(user_id=1)] == ["Молочка", "Снеки"]
    assert [item.item_name for item in recorder.list_receipt_items(ids[1])] == ["Чипсы"]


def test_shop_defaults_are_off_unless_enabled(learning_store, vocabulary) -> None:
    controller = ReceiptDialogueController(learning_store, vocabulary)

    step = controller.start(1, _receipt(("Аспирин", "900"), shop_name="Аптека №5"))

    assert step.state == "AWAITING_ITEM_CATEGORY"


def test_packaged_vocabulary_prompts_for_unlearned_magnum_items(learning_store) -> None:
    controller = ReceiptDialogueController(learning_store, load_category_vocabulary())
    receipt = parse_receipt_lines(["Magnum - Abay", "ул. Abay 1", "Состав чека", "1. Хлеб", "1 x 1 200", "Итого: 1200 тг"])

    step, prompts = _run_to_completion(controller, 1, receipt, "Снеки")

    assert prompts == 1
    assert [group.category for group in step.finalized.groups] == ["Снеки"]
    assert learning_store.lookup_product_category("Хлеб") == "Снеки"


def test_unmapped_category_gets_vocabulary_default_tag(vocabulary) -> None:
    receipt = _receipt(("Губка", "300"))

    finalized = finalize_receipt(receipt, [ReceiptItem("Губка", Decimal("300"), "Хозтовары")], vocabulary)

    assert finalized.intents[0].tag == vocabulary.default_tag == "Разное"
