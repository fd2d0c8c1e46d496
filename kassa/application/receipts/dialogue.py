"""One-item-at-a-time category dialogue for a scanned receipt.

Each chat owns at most one DialogueSession. A new receipt for the same chat
replaces the previous session; finalize and cancel tear it down.
"""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass, replace
from typing import Literal

from kassa.domain.ports import CategoryLearningStore
from kassa.domain.receipt import ReceiptItem, ReceiptResult
from kassa.domain.transaction import FinalizedReceipt
from kassa.receipt.categories import CANCEL_WORD, CategoryVocabulary
from kassa.runtime.logging import get_logger

from .finalize import finalize_receipt

logger = get_logger(__name__)

DialogueState = Literal[
    "AWAITING_ITEM_CATEGORY",
    "FINALIZED",
    "CANCELLED",
    "NO_SESSION",
]

ChatId = Hashable


@dataclass
class DialogueSession:
    """Per-chat receipt state; ``items`` are copies whose category is filled in place."""

    receipt: ReceiptResult
    items: list[ReceiptItem]
    pending_item_index: int | None = None

    @property
    def pending_item(self) -> ReceiptItem | None:
        if self.pending_item_index is None:
            return None
        return self.items[self.pending_item_index]


@dataclass(frozen=True)
class DialogueStep:
    """What the chat layer should say next."""

    state: DialogueState
    receipt: ReceiptResult | None = None
    item: ReceiptItem | None = None
    item_index: int | None = None
    # False when the reply was not a known category and the same item is asked again
    accepted: bool = True
    learned: tuple[str, str] | None = None
    finalized: FinalizedReceipt | None = None


class ReceiptDialogueController:
    """Drive category prompts for every receipt item without a known category."""

    def __init__(
        self,
        store: CategoryLearningStore,
        vocabulary: CategoryVocabulary,
        use_shop_defaults: bool = False,
    ) -> None:
        self._store = store
        self._vocabulary = vocabulary
        self._use_shop_defaults = use_shop_defaults
        self._sessions: dict[ChatId, DialogueSession] = {}

    def session(self, chat_id: ChatId) -> DialogueSession | None:
        return self._sessions.get(chat_id)

    def has_session(self, chat_id: ChatId) -> bool:
        return chat_id in self._sessions

    def cancel(self, chat_id: ChatId) -> bool:
        """Drop the chat's session without side effects; True if one existed."""
        return self._sessions.pop(chat_id, None) is not None

    def _known_category(self, receipt: ReceiptResult, item: ReceiptItem) -> str | None:
        category = self._store.lookup_product_category(item.name)
        if category is None and self._use_shop_defaults:
            category = self._vocabulary.shop_category(receipt.shop_name)
        return category

    def start(self, chat_id: ChatId, receipt: ReceiptResult) -> DialogueStep:
        """Open a session for a freshly parsed receipt, replacing any existing one."""
        if chat_id in self._sessions:
            logger.info("Replacing unfinished receipt session for chat %s", chat_id)

        items = [replace(item, category=self._known_category(receipt, item)) for item in receipt.items]
        session = DialogueSession(receipt=receipt, items=items)
        self._sessions[chat_id] = session
        known = sum(1 for item in items if item.category)
        logger.debug("Receipt session for chat %s: %d items, %d auto-filled", chat_id, len(items), known)
        return self._advance(chat_id, session)

    def handle_reply(self, chat_id: ChatId, text: str) -> DialogueStep:
        """Apply a user's reply to the pending item."""
        session = self._sessions.get(chat_id)
        if session is None:
            return DialogueStep(state="NO_SESSION")

        if text.strip() == CANCEL_WORD:
            self.cancel(chat_id)
            return DialogueStep(state="CANCELLED", receipt=session.receipt)

        item = session.pending_item
        category = self._vocabulary.match_label(text)
        if item is None or category is None:
            return DialogueStep(
                state="AWAITING_ITEM_CATEGORY",
                receipt=session.receipt,
                item=item,
                item_index=session.pending_item_index,
                accepted=False,
            )

        # Always upsert, so a changed answer overrides an older mapping.
        self._store.learn_product_category(item.name, category)
        item.category = category
        return self._advance(chat_id, session, learned=(item.name, category))

    def _advance(
        self,
        chat_id: ChatId,
        session: DialogueSession,
        learned: tuple[str, str] | None = None,
    ) -> DialogueStep:
        next_index = next((i for i, item in enumerate(session.items) if not item.category), None)
        if next_index is None:
            finalized = finalize_receipt(session.receipt, session.items, self._vocabulary)
            del self._sessions[chat_id]
            return DialogueStep(
                state="FINALIZED",
                receipt=session.receipt,
                learned=learned,
                finalized=finalized,
            )

        session.pending_item_index = next_index
        return DialogueStep(
            state="AWAITING_ITEM_CATEGORY",
            receipt=session.receipt,
            item=session.items[next_index],
            item_index=next_index,
            learned=learned,
        )
