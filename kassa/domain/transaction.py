"""Transaction intents produced from finalized receipts and manual entries."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Literal

from kassa.domain.receipt import ReceiptItem, ReceiptResult

TransactionType = Literal["expense", "income", "transfer"]

MAIN_ACCOUNT = "Основной"


@dataclass(frozen=True)
class TransactionIntent:
    """A transaction ready to hand to the persistence collaborator."""

    type: TransactionType
    amount: Decimal
    category: str
    tag: str
    comment: str
    date: str | None = None
    source_account: str | None = MAIN_ACCOUNT
    target_account: str | None = None


@dataclass(frozen=True)
class CategoryGroup:
    """Receipt items sharing one category, in first-seen order."""

    category: str
    items: tuple[ReceiptItem, ...]

    @property
    def total(self) -> Decimal:
        return sum((item.price for item in self.items), Decimal("0"))


@dataclass(frozen=True)
class FinalizedReceipt:
    """A receipt whose items all carry a category, grouped into transactions."""

    receipt: ReceiptResult
    groups: tuple[CategoryGroup, ...]
    intents: tuple[TransactionIntent, ...]
