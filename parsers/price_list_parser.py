"""
Supplier price-list line parser.

Suppliers send their daily prices as WhatsApp text:

    *SAYUR*
    Carrot 4.5kg 15
    Kailan 1kg RM6.50
    Baby corn 80g x 50pkt 38
    Price: ex-farm, cash on delivery

Each item line carries a pack token (number + unit, optionally
"x <number><unit>" for packs of N) followed by the price. Lines without
a pack token or a price are not price lines and come back as None.
"""

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Optional

import structlog

from config.parsing import DEFAULT_UOM_VOCABULARY, DEFAULT_CURRENCY_PREFIXES
from parsers.uom_vocabulary import uom_alternation

logger = structlog.get_logger(__name__)


@dataclass
class ParsedPriceLine:
    """Fields extracted from one price-list line, before product matching."""
    raw_line: str
    name_text: str
    uom: str  # Raw pack token as written, e.g. "80g x 50pkt"
    price: Decimal


NUMBER = r'\d+(?:\.\d+)?'

HEADER_PREFIX = "*"
EXPLANATORY_MARKER = "price:"


@lru_cache(maxsize=32)
def _pack_pattern(vocabulary: tuple[str, ...]) -> re.Pattern:
    """<num><uom> with an optional " x <num><unit>" pack suffix."""
    return re.compile(
        r'(?:^|(?<=\s)|(?<=-))(' + NUMBER + r'\s*(?:' + uom_alternation(vocabulary) + r')\b'
        r'(?:\s*[xX]\s*' + NUMBER + r'\s*[a-zA-Z]+)?)',
        re.IGNORECASE
    )


@lru_cache(maxsize=32)
def _price_pattern(prefixes: tuple[str, ...]) -> re.Pattern:
    """First standalone number after the pack token, optionally currency-prefixed.

    Digits glued to a word ("grade2") are part of the word, not a price.
    """
    currency = "|".join(re.escape(p) for p in prefixes if p) or "RM"
    return re.compile(
        r'(?<![\w.])(?:(?:' + currency + r')\s*)?(' + NUMBER + r')(?!\w|\.\d)',
        re.IGNORECASE
    )


def is_skippable_line(line: str) -> bool:
    """
    Section headers ("*SAYUR*") and explanatory lines ("Price: ex-farm")
    are never price lines.
    """
    stripped = line.strip()
    return stripped.startswith(HEADER_PREFIX) or EXPLANATORY_MARKER in stripped.lower()


def parse_price_line(
    line: str,
    vocabulary: tuple[str, ...] = DEFAULT_UOM_VOCABULARY,
    currency_prefixes: tuple[str, ...] = DEFAULT_CURRENCY_PREFIXES,
) -> Optional[ParsedPriceLine]:
    """
    Tokenize one price-list line.

    Args:
        line: Raw pasted line
        vocabulary: Known UOM tokens
        currency_prefixes: Markers accepted in front of a price

    Returns:
        ParsedPriceLine, or None for headers, explanatory lines and lines
        without a pack token or a number after it
    """
    if is_skippable_line(line):
        logger.debug("price_line_skipped", line=line)
        return None

    text = line.strip()
    match = _pack_pattern(tuple(vocabulary)).search(text)
    if not match:
        logger.debug("price_line_no_unit", line=line)
        return None

    name = text[:match.start()].strip(" -:")
    after = text[match.end():]

    price_match = _price_pattern(tuple(currency_prefixes)).search(after)
    if not price_match:
        logger.debug("price_line_no_price", line=line)
        return None

    try:
        price = Decimal(price_match.group(1))
    except InvalidOperation:
        return None

    return ParsedPriceLine(
        raw_line=line,
        name_text=name,
        uom=match.group(1).strip(),
        price=price,
    )
