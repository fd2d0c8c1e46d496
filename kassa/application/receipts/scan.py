"""Receipt scan workflow orchestration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Literal

from kassa.domain.errors import OracleFailure, SectionNotFoundError
from kassa.receipt.ocr_result_parser import parse_word_boxes
from kassa.runtime.logging import get_logger

if TYPE_CHECKING:
    from kassa.domain.receipt import ReceiptResult
    from kassa.runtime.ocr_oracle import OcrOracle

logger = get_logger(__name__)

ScanStatus = Literal[
    "ocr_unavailable",
    "no_text",
    "sections_not_found",
    "no_items",
    "parsed",
]


@dataclass(frozen=True)
class ReceiptScanRequest:
    """Inputs for running receipt scan workflow."""

    image_bytes: bytes
    strict: bool = False


@dataclass(frozen=True)
class ReceiptScanResult:
    """Outcome from receipt scan workflow."""

    status: ScanStatus
    receipt: ReceiptResult | None = None
    raw_text: str = ""
    error: str | None = None


def run_receipt_scan(request: ReceiptScanRequest, oracle: OcrOracle) -> ReceiptScanResult:
    """Run scan flow: OCR -> line reconstruction -> layout parse."""
    try:
        words = oracle.detect_text(request.image_bytes)
    except OracleFailure as exc:
        logger.error("OCR failed: %s", exc)
        return ReceiptScanResult(status="ocr_unavailable", error=str(exc))

    try:
        receipt = parse_word_boxes(words, strict=request.strict)
    except OracleFailure as exc:
        logger.warning("OCR returned no text")
        return ReceiptScanResult(status="no_text", error=str(exc))
    except SectionNotFoundError as exc:
        logger.warning("Receipt sections not found: %s", exc)
        return ReceiptScanResult(status="sections_not_found", raw_text=exc.raw_text, error=str(exc))

    logger.info(
        "Parsed %s receipt from %s: %d items, computed %s, declared %s",
        receipt.layout,
        receipt.shop_name,
        len(receipt.items),
        receipt.computed_total,
        receipt.declared_total,
    )
    if receipt.total_mismatch_warning:
        logger.warning("Total mismatch for %s: %s", receipt.shop_name, receipt.total_mismatch_warning)

    if not receipt.items:
        return ReceiptScanResult(status="no_items", receipt=receipt, raw_text=receipt.raw_text)
    return ReceiptScanResult(status="parsed", receipt=receipt, raw_text=receipt.raw_text)
