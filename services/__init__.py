"""
Business logic services.

Each service handles one step of the quick-paste flow.
"""

from services.entity_matcher import EntityMatcher, MatchWeights, MatchResult
from services.customer_resolver_service import CustomerResolver, get_customer_resolver
from services.product_resolver_service import ProductResolver
from services.staging_service import StagingList
from services.order_parse_service import (
    OrderParseService,
    OrderParseResult,
    get_order_parse_service,
)
from services.price_list_service import (
    PriceListService,
    PriceListParseResult,
    get_price_list_service,
)
from services.order_history_service import OrderHistoryService, get_order_history_service
from services.commit_service import CommitService, get_commit_service
from services.catalog_service import CatalogService, get_catalog_service

__all__ = [
    "EntityMatcher",
    "MatchWeights",
    "MatchResult",
    "CustomerResolver",
    "get_customer_resolver",
    "ProductResolver",
    "StagingList",
    "OrderParseService",
    "OrderParseResult",
    "get_order_parse_service",
    "PriceListService",
    "PriceListParseResult",
    "get_price_list_service",
    "OrderHistoryService",
    "get_order_history_service",
    "CommitService",
    "get_commit_service",
    "CatalogService",
    "get_catalog_service",
]
