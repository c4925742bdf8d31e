"""
Text utilities for pasted order text.

Used for line segmentation and for normalizing customer/product names
before fuzzy comparison.
"""

import re
import unicodedata
from typing import Optional

_NON_WORD = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")
_BRACKETED = re.compile(r"\(.*?\)")


def fold_accents(text: str) -> str:
    """
    Remove accent marks, keeping the base characters.

    - "Jalapeño" → "Jalapeno"
    - "Café Kuala" → "Cafe Kuala"
    """
    # NFD decomposition separates base chars from accents
    normalized = unicodedata.normalize('NFD', text)
    return ''.join(
        c for c in normalized
        if unicodedata.category(c) != 'Mn'
    )


def normalize_match_text(text: Optional[str]) -> str:
    """
    Normalize a name for fuzzy comparison.

    Lowercases, folds accents, turns every punctuation character into a
    space and collapses whitespace:
    - "HeyTea - Genting" → "heytea genting"
    - "  Mango (Gold)  Susu " → "mango gold susu"

    Args:
        text: Raw name or pasted line

    Returns:
        Normalized string ("" for empty input)
    """
    if not text:
        return ""

    text = fold_accents(text).lower()
    text = _NON_WORD.sub(" ", text)
    text = text.replace("_", " ")
    return _WHITESPACE.sub(" ", text).strip()


def strip_bracketed(text: Optional[str]) -> str:
    """Remove every "(...)" group and tidy the remaining whitespace."""
    if not text:
        return ""
    return _WHITESPACE.sub(" ", _BRACKETED.sub(" ", text)).strip()


def tokenize(text: str, min_length: int = 1) -> list[str]:
    """
    Split normalized text into tokens.

    Args:
        text: Already-normalized text
        min_length: Tokens shorter than this are dropped

    Returns:
        List of tokens in original order
    """
    return [t for t in text.split(" ") if len(t) >= min_length]


def split_lines(text: Optional[str]) -> list[str]:
    """
    Split pasted text into trimmed, non-empty lines.

    Handles Windows/Mac line endings from copied WhatsApp messages.
    """
    if not text:
        return []
    lines = text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    return [line.strip() for line in lines if line.strip()]
