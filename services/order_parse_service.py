"""
Order parse service: pasted WhatsApp order → staged order rows.

Pipeline (one synchronous pass over the pasted text):
1. Split into trimmed, non-empty lines
2. Resolve the customer from line 1
3. Fetch the customer's recent product codes (the only I/O, optional)
4. Drop the header line unless it already looks like an item
5. Per line: delivery-date override, or tokenize + resolve product
6. Stage every item line, matched or not

Nothing here raises for messy text. Lines that cannot be matched are
staged with matched_product_code=None for a person to fix.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Iterable, Optional

import structlog

from config.parsing import ParsingConfig
from models.catalog import CustomerRecord, ProductRecord
from models.staging import ParsedOrderItem, RawLine, StagingKind
from parsers.order_line_parser import (
    looks_like_item_line,
    parse_delivery_date,
    parse_order_line,
)
from services.customer_resolver_service import get_customer_resolver, history_fragment
from services.product_resolver_service import ProductResolver
from services.staging_service import StagingList
from utils.text_utils import split_lines

logger = structlog.get_logger(__name__)

# fragment -> product codes the customer ordered before
HistoryFetcher = Callable[[str], set[str]]


@dataclass
class OrderParseResult:
    """Everything the review screen needs after a paste."""
    staging: StagingList
    customer: Optional[CustomerRecord] = None
    customer_score: Optional[float] = None
    delivery_date_override: Optional[date] = None
    delivery_date: Optional[date] = None
    history_codes: set[str] = field(default_factory=set)

    @property
    def unresolved_count(self) -> int:
        return self.staging.unresolved_count

    @property
    def resolved_count(self) -> int:
        return self.staging.resolved_count

    @property
    def has_unresolved(self) -> bool:
        return self.staging.has_unresolved


def default_delivery_date(now: datetime, cutoff_hour: int) -> date:
    """
    Delivery date when none was pasted.

    Orders in before the cut-off go out today, later ones tomorrow.
    """
    if now.hour < cutoff_hour:
        return now.date()
    return now.date() + timedelta(days=1)


class OrderParseService:
    """
    Order paste pipeline.

    Catalog and customer data are passed in per call; the service keeps
    no state between parses.
    """

    def __init__(self, config: Optional[ParsingConfig] = None):
        self.config = config

    def _config(self, override: Optional[ParsingConfig]) -> ParsingConfig:
        if override is not None:
            return override
        if self.config is None:
            self.config = ParsingConfig.from_settings()
        return self.config

    def _fetch_history(
        self,
        customer: CustomerRecord,
        fetch_recent_product_codes: Optional[HistoryFetcher],
    ) -> set[str]:
        """Past product codes for the customer; empty on any failure."""
        if fetch_recent_product_codes is None:
            return set()

        fragment = history_fragment(customer)
        if not fragment:
            return set()

        try:
            codes = fetch_recent_product_codes(fragment)
        except Exception as e:
            logger.warning(
                "history_lookup_failed",
                customer_id=customer.id,
                fragment=fragment,
                error=str(e),
            )
            return set()

        codes = {c for c in (codes or set()) if c}
        logger.debug("history_loaded", customer_id=customer.id, codes=len(codes))
        return codes

    def parse(
        self,
        text: str,
        customers: Iterable[CustomerRecord],
        products: Iterable[ProductRecord],
        fetch_recent_product_codes: Optional[HistoryFetcher] = None,
        now: Optional[datetime] = None,
        config: Optional[ParsingConfig] = None,
    ) -> OrderParseResult:
        """
        Parse a pasted order.

        Args:
            text: Pasted order text
            customers: Customer registry
            products: Product catalog
            fetch_recent_product_codes: Optional history lookup by customer
                name fragment
            now: Clock for the default delivery date (defaults to now)
            config: Per-call parsing overrides

        Returns:
            OrderParseResult with one staged row per item line
        """
        cfg = self._config(config)
        now = now or datetime.now()
        products = list(products)

        staging = StagingList(kind=StagingKind.ORDER, default_uom=cfg.default_uom)
        result = OrderParseResult(staging=staging)

        lines = [RawLine(index=i, text=t) for i, t in enumerate(split_lines(text))]
        if not lines:
            result.delivery_date = default_delivery_date(now, cfg.order_cutoff_hour)
            staging.delivery_date = result.delivery_date
            return result

        # Customer header
        match = get_customer_resolver().resolve(
            lines[0].text, customers, threshold=cfg.customer_match_threshold
        )
        if match:
            result.customer = match.candidate
            result.customer_score = round(match.score, 2)
            staging.customer_id = match.candidate.id
            result.history_codes = self._fetch_history(match.candidate, fetch_recent_product_codes)
            item_lines = lines[1:]
        elif looks_like_item_line(lines[0].text):
            item_lines = lines
        else:
            logger.debug("header_line_discarded", line=lines[0].text)
            item_lines = lines[1:]

        product_resolver = ProductResolver(cfg)

        for raw in item_lines:
            override = parse_delivery_date(raw.text, reference=now.date())
            if override is not None:
                result.delivery_date_override = override
                continue

            parsed = parse_order_line(raw.text, cfg.uom_vocabulary, cfg.currency_prefixes)
            product_match = product_resolver.resolve(
                parsed.match_text, products, result.history_codes
            )
            product = product_match.candidate if product_match else None

            staging.add_item(ParsedOrderItem(
                line_index=raw.index,
                raw_line=raw.text,
                quantity=parsed.quantity,
                uom=product_resolver.resolve_uom(parsed.uom, product),
                price=parsed.price,
                matched_product_code=product.code if product else None,
                match_score=round(product_match.score, 2) if product_match else None,
            ))

        result.delivery_date = (
            result.delivery_date_override
            or default_delivery_date(now, cfg.order_cutoff_hour)
        )
        staging.delivery_date = result.delivery_date

        logger.info(
            "order_paste_parsed",
            staging_id=staging.staging_id,
            lines=len(lines),
            items=len(staging),
            resolved=staging.resolved_count,
            unresolved=staging.unresolved_count,
            customer_id=result.customer.id if result.customer else None,
            delivery_date=str(result.delivery_date),
        )
        return result


# Singleton instance for convenience
_order_parse_service: Optional[OrderParseService] = None

def get_order_parse_service() -> OrderParseService:
    """Get or create OrderParseService instance."""
    global _order_parse_service
    if _order_parse_service is None:
        _order_parse_service = OrderParseService()
    return _order_parse_service
