"""Receipt pipeline failures."""


class ReceiptError(Exception):
    """Base class for receipt parsing failures."""


class OracleFailure(ReceiptError, RuntimeError):
    """Raised when the OCR oracle is unreachable or returns no text."""


class SectionNotFoundError(ReceiptError, ValueError):
    """Raised when the item region anchors cannot be located.

    Carries the reconstructed text so callers can offer it for inspection.
    """

    def __init__(self, message: str, raw_text: str = "") -> None:
        super().__init__(message)
        self.raw_text = raw_text
