"""Group categorized receipt items into expense transactions and record them."""

from __future__ import annotations

from collections.abc import Sequence

from kassa.domain.ports import TransactionRecorder
from kassa.domain.receipt import ReceiptItem, ReceiptResult
from kassa.domain.transaction import MAIN_ACCOUNT, CategoryGroup, FinalizedReceipt, TransactionIntent
from kassa.receipt.categories import CategoryVocabulary
from kassa.receipt.date_utils import fallback_receipt_date
from kassa.receipt.formatter import format_receipt_comment
from kassa.runtime.logging import get_logger

logger = get_logger(__name__)


def group_items_by_category(items: Sequence[ReceiptItem]) -> tuple[CategoryGroup, ...]:
    """Group items by category, keeping categories in first-seen order."""
    grouped: dict[str, list[ReceiptItem]] = {}
    for item in items:
        if not item.category:
            raise ValueError(f"Item has no category: {item.name}")
        grouped.setdefault(item.category, []).append(item)
    return tuple(CategoryGroup(category=category, items=tuple(members)) for category, members in grouped.items())


def finalize_receipt(
    receipt: ReceiptResult,
    items: Sequence[ReceiptItem],
    vocabulary: CategoryVocabulary,
) -> FinalizedReceipt:
    """Build one expense intent per category group."""
    groups = group_items_by_category(items)
    date = receipt.date or fallback_receipt_date()
    intents = tuple(
        TransactionIntent(
            type="expense",
            amount=group.total,
            category=group.category,
            tag=vocabulary.tag_for(group.category),
            comment=format_receipt_comment(receipt.shop_name, group.items, receipt.address),
            date=date,
            source_account=MAIN_ACCOUNT,
            target_account=None,
        )
        for group in groups
    )
    return FinalizedReceipt(receipt=receipt, groups=groups, intents=intents)


def record_finalized_receipt(
    finalized: FinalizedReceipt,
    recorder: TransactionRecorder,
    user_id: int | None = None,
) -> list[int]:
    """Persist each group as a transaction plus its per-item detail rows."""
    transaction_ids: list[int] = []
    for group, intent in zip(finalized.groups, finalized.intents):
        transaction_id = recorder.record_transaction(intent, user_id)
        recorder.record_receipt_items(transaction_id, finalized.receipt.shop_name, group.items, intent.date)
        transaction_ids.append(transaction_id)
    logger.info(
        "Recorded receipt from %s as %d transaction(s)",
        finalized.receipt.shop_name,
        len(transaction_ids),
    )
    return transaction_ids
