"""kassa: receipt-OCR expense tracking for a personal finance chat bot."""

__version__ = "0.3.0"
