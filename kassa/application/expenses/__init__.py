"""Manual expense entry workflow."""

from kassa.application.expenses.entry import ExpenseEntryController, ExpenseStep, parse_amount

__all__ = [
    "ExpenseEntryController",
    "ExpenseStep",
    "parse_amount",
]
