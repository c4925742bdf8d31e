"""
Order line parser for pasted WhatsApp orders.

Splits one free-text item line into quantity, unit, price and the
remaining product-name text. Customers write the fields in any order:

    2CTN MANGO GOLD SUSU
    avocado 5pcs RM12.50
    - Tomato (ripe) 3 kg
    1. Kangkung x 2 bkl
    Limau nipis 5

Each step can short-circuit the next. Nothing here raises for bad input:
a line that defeats every pattern comes back as quantity 1, no unit,
price 0 and the whole line as name text.
"""

import re
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from typing import Optional

import structlog

from config.parsing import DEFAULT_UOM_VOCABULARY, DEFAULT_CURRENCY_PREFIXES
from parsers.uom_vocabulary import uom_alternation

logger = structlog.get_logger(__name__)


# ===================
# DATA CLASSES
# ===================

@dataclass
class ParsedLine:
    """Fields extracted from one order line, before product matching."""
    raw_line: str
    quantity: Decimal = Decimal("1")
    uom: str = ""
    price: Decimal = Decimal("0")
    name_text: str = ""
    note: str = ""  # Trailing "(...)" content

    @property
    def match_text(self) -> str:
        """Name text with the bracket note re-attached, as scored by the product resolver."""
        if self.note:
            return f"{self.name_text} ({self.note})".strip()
        return self.name_text


# ===================
# PATTERNS
# ===================

# Full-line delivery date: 24/2/2026, 24-02-26, 24.2.2026, 24/2
DATE_LINE_PATTERN = re.compile(
    r'^\s*(\d{1,2})([/\-.])(\d{1,2})(?:\2(\d{2}|\d{4}))?\s*$'
)

# Leading "-", "*", "•" bullets or "1. " numbering
BULLET_PATTERN = re.compile(r'^[-*•\s]+|^\d+\.\s+')

# Trailing "(...)" note
TRAILING_NOTE_PATTERN = re.compile(r'\(([^()]*)\)\s*$')

# First line of an order that is really an item ("- 2kg ...", "3 ctn ...")
ITEM_LIKE_PATTERN = re.compile(r'^[-*•\s]*\d+')

NUMBER = r'\d+(?:\.\d+)?'

# Quantity with no unit at the end of the line: "avocado 5", "mango x 2"
QTY_ONLY_PATTERN = re.compile(r'(?:\s|-|(?<![A-Za-z])[xX])\s*(' + NUMBER + r')\s*$')

# Leftover separators around the product name
EDGE_SEPARATORS = re.compile(r'^[-:]+\s*|\s*[-:]+$')


def _currency_alternation(prefixes: tuple[str, ...]) -> str:
    return "|".join(re.escape(p) for p in prefixes if p) or "RM"


@lru_cache(maxsize=32)
def _qty_uom_pattern(vocabulary: tuple[str, ...]) -> re.Pattern:
    """<number><uom> at start, after whitespace, '-' or 'x', plus the rest of the line."""
    return re.compile(
        r'(?:^|\s|-|(?<![A-Za-z])[xX])\s*(' + NUMBER + r')\s*(' + uom_alternation(vocabulary) + r')\b(.*)$',
        re.IGNORECASE
    )


@lru_cache(maxsize=32)
def _exact_price_pattern(prefixes: tuple[str, ...]) -> re.Pattern:
    """Trailing text that is nothing but a price: "RM 12", "rm8.5", "12.50"."""
    return re.compile(
        r'^(?:(?:' + _currency_alternation(prefixes) + r')\s*(' + NUMBER + r')|(\d+\.\d{1,2}))$',
        re.IGNORECASE
    )


@lru_cache(maxsize=32)
def _trailing_price_pattern(prefixes: tuple[str, ...]) -> re.Pattern:
    """A price at the very end of the name text."""
    return re.compile(
        r'\s+(?:(?:' + _currency_alternation(prefixes) + r')\s*(' + NUMBER + r')|(\d+\.\d{1,2}))\s*$',
        re.IGNORECASE
    )


# ===================
# HELPERS
# ===================

def _to_decimal(value: str) -> Optional[Decimal]:
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError):
        return None


def _ends_with_currency_price(text: str, prefixes: tuple[str, ...]) -> bool:
    """True for text like "Limau RM 4.50", which ends in a price rather than a quantity."""
    match = _trailing_price_pattern(prefixes).search(text)
    return bool(match and match.group(1) is not None)


def parse_delivery_date(line: str, reference: Optional[date] = None) -> Optional[date]:
    """
    Interpret a whole line as a D/M[/Y] delivery date.

    Two-digit years mean 20YY. Without a year, the reference date's year is
    used; that short form only accepts "/" or "-" so a bare "2.5" stays an
    item line.

    Args:
        line: One pasted line
        reference: Date supplying the default year (today if None)

    Returns:
        The date, or None if the line is not a valid calendar date
    """
    match = DATE_LINE_PATTERN.match(line)
    if not match:
        return None

    day, separator, month, year = match.groups()
    if year is None:
        if separator == ".":
            return None
        year_num = (reference or date.today()).year
    elif len(year) == 2:
        year_num = 2000 + int(year)
    else:
        year_num = int(year)

    try:
        return date(year_num, int(month), int(day))
    except ValueError:
        logger.debug("date_line_invalid", line=line)
        return None


def looks_like_item_line(line: str) -> bool:
    """True if the line starts (after bullets) with a digit, like "2kg apple"."""
    return bool(ITEM_LIKE_PATTERN.match(line))


def strip_bullet(line: str) -> str:
    """Remove a leading bullet or "1. " numbering."""
    return BULLET_PATTERN.sub('', line, count=1).strip()


def extract_trailing_note(text: str) -> tuple[str, str]:
    """
    Split off a trailing "(...)" note.

    - "Tomato (ripe)" → ("Tomato", "ripe")
    - "Tomato" → ("Tomato", "")
    """
    match = TRAILING_NOTE_PATTERN.search(text)
    if not match:
        return text, ""
    return text[:match.start()].strip(), match.group(1).strip()


def clean_name_edges(text: str) -> str:
    """Drop dangling "-" and ":" at either end."""
    return EDGE_SEPARATORS.sub('', text.strip()).strip()


# ===================
# MAIN PARSER
# ===================

def parse_order_line(
    line: str,
    vocabulary: tuple[str, ...] = DEFAULT_UOM_VOCABULARY,
    currency_prefixes: tuple[str, ...] = DEFAULT_CURRENCY_PREFIXES,
) -> ParsedLine:
    """
    Tokenize one order item line.

    Args:
        line: Raw pasted line (date lines are handled by the caller)
        vocabulary: Known UOM tokens
        currency_prefixes: Markers accepted in front of a price

    Returns:
        ParsedLine with quantity/uom/price and candidate name text
    """
    vocabulary = tuple(vocabulary)
    currency_prefixes = tuple(currency_prefixes)
    result = ParsedLine(raw_line=line)

    text = strip_bullet(line)
    text, result.note = extract_trailing_note(text)
    name = text

    match = _qty_uom_pattern(vocabulary).search(text)
    if match:
        quantity = _to_decimal(match.group(1))
        if quantity is not None:
            result.quantity = quantity
        result.uom = match.group(2).upper()

        before = text[:match.start()].strip()
        after = match.group(3).strip()

        if not before:
            # Unit first: "1kg Apple"
            name = after
        elif after:
            price_match = _exact_price_pattern(currency_prefixes).match(after)
            if price_match:
                price = _to_decimal(price_match.group(1) or price_match.group(2))
                if price is not None:
                    result.price = price
                name = before
            else:
                name = f"{before} {after}"
        else:
            name = before
    elif not _ends_with_currency_price(text, currency_prefixes):
        qty_match = QTY_ONLY_PATTERN.search(text)
        if qty_match:
            quantity = _to_decimal(qty_match.group(1))
            if quantity is not None:
                result.quantity = quantity
            name = text[:qty_match.start()].strip()

    if result.price == 0:
        price_match = _trailing_price_pattern(currency_prefixes).search(name)
        if price_match:
            price = _to_decimal(price_match.group(1) or price_match.group(2))
            if price is not None:
                result.price = price
                name = name[:price_match.start()].strip()

    result.name_text = clean_name_edges(name)

    logger.debug(
        "order_line_parsed",
        line=line,
        quantity=str(result.quantity),
        uom=result.uom,
        price=str(result.price),
        name=result.name_text,
    )
    return result
