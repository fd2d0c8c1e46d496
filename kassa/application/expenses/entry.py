"""Manual expense entry: amount -> comment -> category, with comment learning.

A comment the user has categorized before is recognized and recorded
without asking for the category again.
"""

from __future__ import annotations

import re
from collections.abc import Hashable
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Literal

from kassa.domain.ports import CategoryLearningStore
from kassa.domain.transaction import MAIN_ACCOUNT, TransactionIntent
from kassa.receipt.categories import CANCEL_WORD, CategoryVocabulary
from kassa.runtime.logging import get_logger

logger = get_logger(__name__)

SKIP_WORD = "Пропустить"
BACK_WORD = "Назад"

ExpenseState = Literal[
    "AWAITING_AMOUNT",
    "AWAITING_COMMENT",
    "AWAITING_CATEGORY",
    "RECORDED",
    "CANCELLED",
    "NO_SESSION",
]


def parse_amount(text: str) -> Decimal | None:
    """Read a typed amount: "1 500", "1500,50", "1500 тг" -> Decimal; None if unreadable."""
    cleaned = re.sub(r"[^0-9.,]", "", text).replace(",", ".")
    match = re.match(r"\d*\.?\d+", cleaned)
    if not match:
        return None
    try:
        return abs(Decimal(match.group(0)))
    except InvalidOperation:
        return None


@dataclass
class ExpenseDraft:
    state: ExpenseState = "AWAITING_AMOUNT"
    amount: Decimal | None = None
    comment: str = ""


@dataclass(frozen=True)
class ExpenseStep:
    state: ExpenseState
    accepted: bool = True
    intent: TransactionIntent | None = None
    # True when the category came from a learned comment
    auto_categorized: bool = False


class ExpenseEntryController:
    """Per-chat manual expense drafts."""

    def __init__(self, store: CategoryLearningStore, vocabulary: CategoryVocabulary) -> None:
        self._store = store
        self._vocabulary = vocabulary
        self._drafts: dict[Hashable, ExpenseDraft] = {}

    def has_session(self, chat_id: Hashable) -> bool:
        return chat_id in self._drafts

    def cancel(self, chat_id: Hashable) -> bool:
        return self._drafts.pop(chat_id, None) is not None

    def start(self, chat_id: Hashable) -> ExpenseStep:
        self._drafts[chat_id] = ExpenseDraft()
        return ExpenseStep(state="AWAITING_AMOUNT")

    def _intent(self, draft: ExpenseDraft, category: str) -> TransactionIntent:
        assert draft.amount is not None
        return TransactionIntent(
            type="expense",
            amount=draft.amount,
            category=category,
            tag=self._vocabulary.tag_for(category),
            comment=draft.comment,
            source_account=MAIN_ACCOUNT,
            target_account=None,
        )

    def _back(self, chat_id: Hashable, draft: ExpenseDraft) -> ExpenseStep:
        if draft.state == "AWAITING_CATEGORY":
            draft.state = "AWAITING_COMMENT"
        elif draft.state == "AWAITING_COMMENT":
            draft.state = "AWAITING_AMOUNT"
        else:
            self.cancel(chat_id)
            return ExpenseStep(state="CANCELLED")
        return ExpenseStep(state=draft.state)

    def handle_reply(self, chat_id: Hashable, text: str) -> ExpenseStep:
        draft = self._drafts.get(chat_id)
        if draft is None:
            return ExpenseStep(state="NO_SESSION")

        text = text.strip()
        if text == CANCEL_WORD:
            self.cancel(chat_id)
            return ExpenseStep(state="CANCELLED")
        if text == BACK_WORD:
            return self._back(chat_id, draft)

        if draft.state == "AWAITING_AMOUNT":
            amount = parse_amount(text)
            if not amount:
                return ExpenseStep(state=draft.state, accepted=False)
            draft.amount = amount
            draft.state = "AWAITING_COMMENT"
            return ExpenseStep(state=draft.state)

        if draft.state == "AWAITING_COMMENT":
            draft.comment = "" if text == SKIP_WORD else text
            known = self._store.lookup_comment_category(draft.comment) if draft.comment else None
            if known:
                logger.info("Recognized comment %r as %s", draft.comment, known)
                del self._drafts[chat_id]
                return ExpenseStep(state="RECORDED", intent=self._intent(draft, known), auto_categorized=True)
            draft.state = "AWAITING_CATEGORY"
            return ExpenseStep(state=draft.state)

        category = self._vocabulary.match_label(text)
        if category is None:
            return ExpenseStep(state=draft.state, accepted=False)
        if draft.comment:
            self._store.learn_comment_category(draft.comment, category)
        del self._drafts[chat_id]
        return ExpenseStep(state="RECORDED", intent=self._intent(draft, category))
