#!/usr/bin/env python3

import argparse
from collections.abc import Callable, Sequence


def _coerce_exit_code(code: object) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    return 1


def _run_legacy_command(command: Callable[[argparse.Namespace], None], args: argparse.Namespace) -> int:
    """
    Normalize command handlers that call sys.exit().

    This keeps process termination centralized in this module's entrypoint.
    """
    try:
        command(args)
    except SystemExit as exc:
        return _coerce_exit_code(exc.code)
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="kassa receipt and expense tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  parse <image>              OCR a receipt image and print the parsed items
  serve [--host] [--port]    Start the receipt parsing HTTP server
  bot                        Run the Telegram bot

Environment:
  TELEGRAM_BOT_TOKEN         Bot token for `bot`
  KASSA_OCR_BACKEND          vision (default) or http
  KASSA_HOME                 Project root holding config/ and data/
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # parse command
    parse_parser = subparsers.add_parser("parse", help="Parse a receipt image")
    parse_parser.add_argument("image", help="Path to receipt image")
    parse_parser.add_argument(
        "--ocr", choices=["vision", "http"], default=None, help="OCR backend (default: $KASSA_OCR_BACKEND or vision)"
    )
    parse_parser.add_argument("--ocr-url", default=None, help="OCR service URL for the http backend")
    parse_parser.add_argument("--strict", action="store_true", help="List item blocks whose price was not found")
    parse_parser.add_argument("--raw", action="store_true", help="Print the reconstructed OCR text first")

    # serve command
    serve_parser = subparsers.add_parser("serve", help="Start receipt parsing server")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=8080, help="Port to bind to (default: 8080)")

    # bot command
    bot_parser = subparsers.add_parser("bot", help="Run the Telegram bot")
    bot_parser.add_argument("--token", default=None, help="Bot token (default: $TELEGRAM_BOT_TOKEN)")
    bot_parser.add_argument("--db-url", default=None, help="SQLAlchemy database URL (default: data/kassa.db)")
    bot_parser.add_argument("--ocr", choices=["vision", "http"], default=None, help="OCR backend")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    if args.command == "parse":
        from kassa.cli.receipt import cmd_parse

        return _run_legacy_command(cmd_parse, args)
    elif args.command == "serve":
        from kassa.cli.receipt import cmd_serve

        return _run_legacy_command(cmd_serve, args)
    elif args.command == "bot":
        from kassa.cli.receipt import cmd_bot

        return _run_legacy_command(cmd_bot, args)

    return 1


if __name__ == "__main__":
    raise SystemExit(main())
