"""
Product resolver: maps free-text item names onto catalog products.

Scoring is length-weighted token overlap (see services/entity_matcher.py)
plus an optional boost for products the customer has ordered before.
Bracketed text is stripped first; "(ripe)" or "(80g)" never counts
towards the match.
"""

from typing import Iterable, Optional

import structlog

from config.parsing import ParsingConfig
from models.catalog import ProductRecord
from services.entity_matcher import EntityMatcher, MatchResult, PRODUCT_WEIGHTS
from utils.text_utils import normalize_match_text, strip_bracketed

logger = structlog.get_logger(__name__)


class ProductResolver:
    """
    Resolves candidate name text to a ProductRecord.

    Usage:
        resolver = ProductResolver(ParsingConfig())
        match = resolver.resolve("mango gold susu (big)", products, {"MGS01"})
    """

    def __init__(
        self,
        config: Optional[ParsingConfig] = None,
        matcher: Optional[EntityMatcher] = None,
    ):
        self.config = config or ParsingConfig()
        self.matcher = matcher or EntityMatcher(PRODUCT_WEIGHTS)

    def score_product(
        self,
        name: str,
        product: ProductRecord,
        history: Optional[set[str]] = None,
    ) -> tuple[float, bool]:
        """
        Final score of one product for an already-normalized name.

        Returns:
            (score including any history boost, exact name match)
        """
        raw = self.matcher.score(name, normalize_match_text(product.name))
        exact = raw >= self.matcher.weights.exact

        if history and raw >= self.config.history_boost_min_score and product.code in history:
            return raw + self.config.history_boost, exact
        return raw, exact

    def resolve(
        self,
        name_text: str,
        products: Iterable[ProductRecord],
        history: Optional[set[str]] = None,
    ) -> Optional[MatchResult[ProductRecord]]:
        """
        Find the best catalog product for a line's name text.

        Args:
            name_text: Candidate name (may still carry a "(note)")
            products: Product catalog
            history: Product codes the customer ordered before

        Returns:
            MatchResult, or None when the best score is below the
            product threshold
        """
        name = normalize_match_text(strip_bracketed(name_text))
        if not name:
            return None

        history = history or set()
        result = self.matcher.best_match(
            products,
            key=lambda p: self.score_product(name, p, history),
            threshold=self.config.product_match_threshold,
        )

        logger.debug(
            "product_match",
            name=name_text,
            product_code=result.candidate.code if result else None,
            score=round(result.score, 2) if result else None,
        )
        return result

    def resolve_uom(self, line_uom: str, product: Optional[ProductRecord]) -> str:
        """
        UOM for a staged row.

        The unit written on the line wins, then the product's base unit,
        then the configured default.
        """
        if line_uom:
            return line_uom.upper()
        if product is not None and product.base_uom:
            return product.base_uom
        return self.config.default_uom
