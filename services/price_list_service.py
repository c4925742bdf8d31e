"""
Price-list service: turns a pasted supplier price list into staged rows.

Unlike orders, a price list has no "unresolved" state. A line is staged
only when it carries a pack token, a positive price and a catalog match;
every other line is dropped. Suppliers quote goods we do not stock, and
those lines are simply not our business.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from config.parsing import ParsingConfig
from models.catalog import ProductRecord, SupplierRecord
from models.staging import ParsedPriceItem, StagingKind
from parsers.price_list_parser import parse_price_line
from services.customer_resolver_service import get_customer_resolver
from services.product_resolver_service import ProductResolver
from services.staging_service import StagingList
from utils.text_utils import split_lines

logger = structlog.get_logger(__name__)


@dataclass
class PriceListParseResult:
    """Staged price rows plus the supplier detected from the first line."""
    staging: StagingList
    supplier: Optional[SupplierRecord] = None
    dropped_count: int = 0


class PriceListService:
    """
    Price-list parsing pipeline.

    Pure in-memory; never touches the database.
    """

    def __init__(self, config: Optional[ParsingConfig] = None):
        self.config = config

    def _config(self, override: Optional[ParsingConfig]) -> ParsingConfig:
        if override is not None:
            return override
        if self.config is None:
            self.config = ParsingConfig.from_settings()
        return self.config

    def parse(
        self,
        text: str,
        products: Iterable[ProductRecord],
        suppliers: Optional[Iterable[SupplierRecord]] = None,
        config: Optional[ParsingConfig] = None,
    ) -> PriceListParseResult:
        """
        Parse a pasted price list.

        Args:
            text: Pasted price list
            products: Product catalog
            suppliers: Supplier registry; when given, the first line is
                checked for a supplier name
            config: Per-call parsing overrides

        Returns:
            PriceListParseResult with only matched, positively priced rows
        """
        cfg = self._config(config)
        products = list(products)
        resolver = ProductResolver(cfg)
        lines = split_lines(text)

        staging = StagingList(kind=StagingKind.PRICE_LIST)
        result = PriceListParseResult(staging=staging)

        if suppliers is not None and lines:
            match = get_customer_resolver().resolve_supplier(
                lines[0], suppliers, threshold=cfg.customer_match_threshold
            )
            if match:
                result.supplier = match.candidate
                staging.supplier_name = match.candidate.name

        for index, line in enumerate(lines):
            parsed = parse_price_line(line, cfg.uom_vocabulary, cfg.currency_prefixes)
            if parsed is None:
                result.dropped_count += 1
                continue

            if parsed.price <= 0:
                logger.debug("price_line_dropped", line=line, reason="no_price")
                result.dropped_count += 1
                continue

            match = resolver.resolve(parsed.name_text, products)
            if match is None:
                logger.debug("price_line_dropped", line=line, reason="no_product")
                result.dropped_count += 1
                continue

            staging.add_item(ParsedPriceItem(
                line_index=index,
                raw_line=line,
                matched_product_code=match.candidate.code,
                matched_product_name=match.candidate.name,
                uom=parsed.uom,
                price=parsed.price,
                match_score=round(match.score, 2),
            ))

        logger.info(
            "price_list_parsed",
            staging_id=staging.staging_id,
            lines=len(lines),
            items=len(staging),
            dropped=result.dropped_count,
            supplier=result.supplier.name if result.supplier else None,
        )
        return result


# Singleton instance for convenience
_price_list_service: Optional[PriceListService] = None

def get_price_list_service() -> PriceListService:
    """Get or create PriceListService instance."""
    global _price_list_service
    if _price_list_service is None:
        _price_list_service = PriceListService()
    return _price_list_service
