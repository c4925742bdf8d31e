"""
Pasted-text parsers.

Turn single lines of WhatsApp text into structured fields. No catalog
matching happens here; see services/ for that.
"""

from parsers.order_line_parser import (
    ParsedLine,
    parse_order_line,
    parse_delivery_date,
    looks_like_item_line,
)
from parsers.price_list_parser import (
    ParsedPriceLine,
    parse_price_line,
    is_skippable_line,
)

__all__ = [
    "ParsedLine",
    "parse_order_line",
    "parse_delivery_date",
    "looks_like_item_line",
    "ParsedPriceLine",
    "parse_price_line",
    "is_skippable_line",
]
