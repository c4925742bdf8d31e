"""
Order history lookups used to boost product matching.

See services/order_parse_service.py for how the result is used.
"""

from typing import Optional
import structlog

from config import get_supabase_client, settings
from config.parsing import HISTORY_LOOKUP_LIMIT
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


class OrderHistoryService:
    """
    Reads past order rows.

    Orders store the customer as display text ("HEYTEA - GENTING"), so the
    lookup matches on a name fragment rather than a customer id.
    """

    def __init__(self, limit: int = HISTORY_LOOKUP_LIMIT):
        self.db = get_supabase_client()
        self.table = "Orders"
        self.limit = limit

    def fetch_recent_product_codes(self, fragment: str) -> set[str]:
        """
        Product codes from the most recent orders whose customer name
        contains the fragment.

        Args:
            fragment: Customer name fragment (e.g. "HeyTea")

        Returns:
            Set of product codes (empty for a blank fragment)

        Raises:
            DatabaseError: If the query fails or times out
        """
        if not fragment or not fragment.strip():
            return set()

        logger.debug("fetching_order_history", fragment=fragment, limit=self.limit)

        try:
            result = (
                self.db.table(self.table)
                .select('"Product Code"')
                .ilike("Customer Name", f"%{fragment.strip()}%")
                .order("Timestamp", desc=True)
                .limit(self.limit)
                .execute()
            )
        except Exception as e:
            logger.error(
                "fetch_order_history_failed",
                fragment=fragment,
                error=str(e)
            )
            raise DatabaseError("select", str(e))

        codes = {
            row.get("Product Code")
            for row in (result.data or [])
            if row.get("Product Code")
        }

        logger.info(
            "order_history_fetched",
            fragment=fragment,
            rows=len(result.data or []),
            codes=len(codes)
        )
        return codes


# Singleton instance for convenience
_order_history_service: Optional[OrderHistoryService] = None

def get_order_history_service() -> OrderHistoryService:
    """Get or create OrderHistoryService instance."""
    global _order_history_service
    if _order_history_service is None:
        _order_history_service = OrderHistoryService(limit=settings.history_lookup_limit)
    return _order_history_service
