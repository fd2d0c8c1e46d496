"""Interfaces the receipt workflows consume from persistence."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from kassa.domain.receipt import ReceiptItem
from kassa.domain.transaction import TransactionIntent


class CategoryLearningStore(Protocol):
    """Learned product-name and comment maps; keys are trimmed and lower-cased."""

    def lookup_product_category(self, name: str) -> str | None: ...

    def learn_product_category(self, name: str, category: str) -> None: ...

    def lookup_comment_category(self, text: str) -> str | None: ...

    def learn_comment_category(self, text: str, category: str) -> None: ...


class TransactionRecorder(Protocol):
    def record_transaction(self, intent: TransactionIntent, user_id: int | None = None) -> int: ...

    def record_receipt_items(
        self,
        transaction_id: int,
        shop_name: str,
        items: Sequence[ReceiptItem],
        date: str | None = None,
    ) -> None: ...
