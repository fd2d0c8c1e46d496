"""Core domain models for kassa.

This module provides the core data models used throughout the project:
- WordBox, ItemBlock, ReceiptItem, ReceiptResult: Receipt scanning models
- TransactionIntent, FinalizedReceipt: Records handed to persistence

Usage:
    from kassa.domain import ReceiptResult, TransactionIntent
"""

from kassa.domain.errors import OracleFailure, ReceiptError, SectionNotFoundError
from kassa.domain.receipt import ItemBlock, ReceiptHeader, ReceiptItem, ReceiptResult, WordBox
from kassa.domain.transaction import (
    MAIN_ACCOUNT,
    CategoryGroup,
    FinalizedReceipt,
    TransactionIntent,
)

__all__ = [
    "WordBox",
    "ItemBlock",
    "ReceiptItem",
    "ReceiptHeader",
    "ReceiptResult",
    "TransactionIntent",
    "CategoryGroup",
    "FinalizedReceipt",
    "MAIN_ACCOUNT",
    "ReceiptError",
    "OracleFailure",
    "SectionNotFoundError",
]
