"""
Unit-of-measure vocabulary helpers.

Builds the regex alternation used by both line parsers. Tokens are
ordered longest first so "KG" is tried before "G" and "BUNCH" before "BAG".
"""

import re
from functools import lru_cache
from typing import Iterable

from config.parsing import DEFAULT_UOM_VOCABULARY


def _canonical(vocabulary: Iterable[str]) -> tuple[str, ...]:
    seen = []
    for token in vocabulary:
        token = token.strip().upper()
        if token and token not in seen:
            seen.append(token)
    return tuple(sorted(seen, key=lambda t: (-len(t), t)))


@lru_cache(maxsize=32)
def uom_alternation(vocabulary: tuple[str, ...] = DEFAULT_UOM_VOCABULARY) -> str:
    """
    Regex alternation for the vocabulary, e.g. "BUNCH|TRAY|ROLL|...|G".

    Args:
        vocabulary: UOM tokens (any case)

    Returns:
        Alternation string without surrounding group
    """
    return "|".join(re.escape(t) for t in _canonical(vocabulary))

