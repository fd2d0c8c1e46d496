"""FastAPI server exposing the receipt parser over HTTP."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from kassa.application.receipts.scan import ReceiptScanRequest, run_receipt_scan
from kassa.domain.receipt import ReceiptResult
from kassa.receipt.ocr_parser.common import format_plain_number
from kassa.runtime.logging import get_logger
from kassa.runtime.ocr_oracle import OcrOracle, create_ocr_oracle
from kassa.runtime.paths import get_paths

logger = get_logger(__name__)

_STATUS_CODES = {
    "parsed": 200,
    "no_items": 200,
    "no_text": 422,
    "sections_not_found": 422,
    "ocr_unavailable": 502,
}


@lru_cache(maxsize=1)
def get_ocr_oracle() -> OcrOracle:
    return create_ocr_oracle()


def receipt_to_dict(receipt: ReceiptResult) -> dict[str, Any]:
    return {
        "shop_name": receipt.shop_name,
        "address": receipt.address,
        "date": receipt.date,
        "layout": receipt.layout,
        "items": [{"name": item.name, "price": format_plain_number(item.price)} for item in receipt.items],
        "declared_total": format_plain_number(receipt.declared_total),
        "computed_total": format_plain_number(receipt.computed_total),
        "total_mismatch_warning": receipt.total_mismatch_warning,
        "unresolved_blocks": list(receipt.unresolved_blocks),
        "raw_text": receipt.raw_text,
    }


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create receipts directories on startup."""
    get_paths().ensure_directories()
    yield


app = FastAPI(title="kassa receipt parser", lifespan=lifespan)


@app.post("/receipts/parse")
async def parse_receipt_upload(request: Request, oracle: OcrOracle = Depends(get_ocr_oracle)) -> JSONResponse:
    """Parse an uploaded receipt image; ``?strict=true`` lists unresolved items."""
    form = await request.form()

    file = None
    for key, value in form.items():
        logger.debug("Form field: key=%r, type=%s", key, type(value))
        if hasattr(value, "read"):
            file = value
            break

    if not file:
        return JSONResponse({"status": "error", "message": "No file found in request"}, status_code=400)

    contents = await file.read()
    strict = request.query_params.get("strict", "").lower() in ("1", "true", "yes")
    result = await asyncio.to_thread(run_receipt_scan, ReceiptScanRequest(image_bytes=contents, strict=strict), oracle)

    body: dict[str, Any] = {"status": result.status}
    if result.receipt is not None:
        body["receipt"] = receipt_to_dict(result.receipt)
    if result.error:
        body["message"] = result.error
    if result.status == "sections_not_found":
        body["raw_text"] = result.raw_text
    return JSONResponse(body, status_code=_STATUS_CODES[result.status])


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
