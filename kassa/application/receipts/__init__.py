"""Receipt workflows."""

from kassa.application.receipts.dialogue import DialogueSession, DialogueStep, ReceiptDialogueController
from kassa.application.receipts.finalize import finalize_receipt, group_items_by_category, record_finalized_receipt
from kassa.application.receipts.scan import ReceiptScanRequest, ReceiptScanResult, run_receipt_scan

__all__ = [
    "DialogueSession",
    "DialogueStep",
    "ReceiptDialogueController",
    "finalize_receipt",
    "group_items_by_category",
    "record_finalized_receipt",
    "ReceiptScanRequest",
    "ReceiptScanResult",
    "run_receipt_scan",
]
