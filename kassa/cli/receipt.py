"""Receipt command handlers used by the unified CLI."""

import argparse
import sys
from pathlib import Path

from kassa.runtime import get_logger

logger = get_logger(__name__)


def cmd_serve(args: argparse.Namespace) -> None:
    """Start the FastAPI receipt parsing server."""
    import uvicorn

    from kassa.service import receipt_server as server

    print(f"Starting receipt server on {args.host}:{args.port}")
    print(f"Parse endpoint: http://{args.host}:{args.port}/receipts/parse")
    print("Press Ctrl+C to stop")

    uvicorn.run(server.app, host=args.host, port=args.port)


def cmd_bot(args: argparse.Namespace) -> None:
    """Run the Telegram bot with long polling."""
    from kassa.service.telegram_bot import run_bot

    run_bot(token=args.token, database_url=args.db_url, ocr_backend=args.ocr)


def cmd_parse(args: argparse.Namespace) -> None:
    """OCR a receipt image and print the parsed result."""
    from kassa.application.receipts.scan import ReceiptScanRequest, run_receipt_scan
    from kassa.receipt.formatter import format_parsed_receipt
    from kassa.runtime.ocr_oracle import create_ocr_oracle

    image_path = Path(args.image)
    if not image_path.exists():
        logger.error("Receipt image not found: %s", image_path)
        print(f"Error: file not found: {image_path}")
        sys.exit(1)

    oracle = create_ocr_oracle(args.ocr, service_url=args.ocr_url)
    result = run_receipt_scan(ReceiptScanRequest(image_bytes=image_path.read_bytes(), strict=args.strict), oracle)

    if result.status == "ocr_unavailable":
        print(f"OCR unavailable: {result.error}")
        if args.ocr == "http":
            print("Make sure the OCR service is running before parsing receipts.")
        sys.exit(1)

    if result.status == "no_text":
        print("OCR returned no text.")
        sys.exit(1)

    if args.raw and result.raw_text:
        print(result.raw_text)
        print("=" * 60)

    if result.status == "sections_not_found":
        print(f"Could not find the item list: {result.error}")
        if not args.raw:
            print("Re-run with --raw to see the recognized text.")
        sys.exit(2)

    receipt = result.receipt
    if receipt is None:
        print("Parse failed: missing receipt output.")
        sys.exit(1)

    print(format_parsed_receipt(receipt))
    if result.status == "no_items":
        sys.exit(2)
