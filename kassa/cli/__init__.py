"""Unified command-line interface for kassa.

Usage:
    kassa parse <image> [--ocr vision|http] [--strict] [--raw]
    kassa serve [--host] [--port]
    kassa bot [--token] [--db-url]
"""
