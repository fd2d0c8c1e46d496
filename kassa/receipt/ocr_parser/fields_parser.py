"""Shop name / address / date extraction helpers."""

import re
from collections.abc import Sequence

from kassa.domain.receipt import ReceiptHeader

from ..date_utils import parse_numeric_date

ADDRESS_MARKER_PATTERN = re.compile(r"обл\.|г\.|ул\.|мкр\.", re.IGNORECASE)
COMPANY_FORM_PATTERN = re.compile(r"ТОО|IP|ИП|LLP|TRADE", re.IGNORECASE)
# Region / city prefix up to the first comma, double space or next capitalised word
ADDRESS_PREFIX_PATTERN = re.compile(
    r"^.*(?:обл\.|г\.|город|Казахстан|Северо-Казахстанская).*?(?:,|\s{2,}|(?=\s[А-ЯA-Z0-9]))",
    re.IGNORECASE,
)
DATE_LINE_PATTERN = re.compile(r"Дата|Date|Время|Time|Күні", re.IGNORECASE)

UNKNOWN_SHOP = "Unknown"


def clean_address(raw_address: str) -> str:
    """Drop the region/city prefix from a printed address."""
    cleaned = ADDRESS_PREFIX_PATTERN.sub("", raw_address, count=1)
    cleaned = cleaned.lstrip(" ,").strip()
    return cleaned or raw_address.strip()


def _extract_shop_and_address(lines: Sequence[str]) -> tuple[str, str]:
    """
    Decide which of the first two lines is the shop and which is the address.

    Fiscal receipts print either "<shop>\\n<address>" or "<address>\\n<legal entity>".
    """
    line0 = lines[0].strip() if len(lines) > 0 else ""
    line1 = lines[1].strip() if len(lines) > 1 else ""

    if ADDRESS_MARKER_PATTERN.search(line0) or COMPANY_FORM_PATTERN.search(line1):
        shop_name, address = line1, line0
    else:
        shop_name, address = line0, line1

    return shop_name or UNKNOWN_SHOP, clean_address(address) if address else ""


def _extract_date(lines: Sequence[str]) -> str | None:
    for line in lines:
        if DATE_LINE_PATTERN.search(line):
            parsed = parse_numeric_date(line)
            if parsed:
                return parsed
    return None


def extract_generic_header(lines: Sequence[str]) -> ReceiptHeader:
    """Extract shop, address and date from a generic fiscal receipt."""
    shop_name, address = _extract_shop_and_address(lines)
    return ReceiptHeader(shop_name=shop_name, address=address, date=_extract_date(lines))
