"""
Customer resolver: picks the customer an order was pasted for.

WhatsApp orders usually open with the outlet name ("HEYTEA GENTING",
"Kafe Daun - Bangsar"). The first line is scored against every
customer's "company branch" text; the branch gets extra credit so that
"heytea genting" prefers the Genting outlet over other HeyTea branches.

The same scorer, without the branch pass, detects which supplier a
price list came from.
"""

import re
from typing import Iterable, Optional

import structlog

from config.parsing import CUSTOMER_MATCH_THRESHOLD
from models.catalog import CustomerRecord, SupplierRecord
from services.entity_matcher import EntityMatcher, MatchResult, CUSTOMER_WEIGHTS
from utils.text_utils import normalize_match_text

logger = structlog.get_logger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")


class CustomerResolver:
    """
    Resolves the first pasted line to a CustomerRecord.

    Stateless; the registry is passed in on every call and never mutated.
    """

    def __init__(self, matcher: Optional[EntityMatcher] = None):
        self.matcher = matcher or EntityMatcher(CUSTOMER_WEIGHTS)

    def score_customer(self, line: str, customer: CustomerRecord) -> tuple[float, bool]:
        """
        Score one customer against an already-normalized line.

        The branch bonus only applies on the token-overlap path; exact and
        containment hits keep their fixed scores.

        Returns:
            (score, exact)
        """
        candidate = normalize_match_text(customer.match_text)
        score = self.matcher.score(line, candidate)

        if score >= self.matcher.weights.exact:
            return score, True

        if self.matcher.weights.containment is not None and (
            line in candidate or candidate in line
        ):
            return score, False

        if customer.branch:
            score += self.matcher.secondary_bonus(line, normalize_match_text(customer.branch))
        return score, False

    def resolve(
        self,
        first_line: str,
        customers: Iterable[CustomerRecord],
        threshold: float = CUSTOMER_MATCH_THRESHOLD,
    ) -> Optional[MatchResult[CustomerRecord]]:
        """
        Find the customer named on the first line.

        Args:
            first_line: First non-empty pasted line
            customers: Customer registry
            threshold: Minimum score to accept

        Returns:
            MatchResult with the customer, or None when nothing reaches
            the threshold
        """
        line = normalize_match_text(first_line)
        if not line:
            return None

        result = self.matcher.best_match(
            customers,
            key=lambda c: self.score_customer(line, c),
            threshold=threshold,
        )

        if result:
            logger.info(
                "customer_resolved",
                line=first_line,
                customer_id=result.candidate.id,
                customer=result.candidate.display_name,
                score=round(result.score, 2),
            )
        else:
            logger.info("customer_unresolved", line=first_line)

        return result

    def resolve_supplier(
        self,
        first_line: str,
        suppliers: Iterable[SupplierRecord],
        threshold: float = CUSTOMER_MATCH_THRESHOLD,
    ) -> Optional[MatchResult[SupplierRecord]]:
        """
        Detect the supplier named on the first line of a price list.

        Uses the customer weights without any branch bonus.
        """
        line = normalize_match_text(first_line)
        if not line:
            return None

        def key(supplier: SupplierRecord) -> tuple[float, bool]:
            score = self.matcher.score(line, normalize_match_text(supplier.name))
            return score, score >= self.matcher.weights.exact

        result = self.matcher.best_match(suppliers, key=key, threshold=threshold)
        if result:
            logger.info(
                "supplier_detected",
                line=first_line,
                supplier=result.candidate.name,
                score=round(result.score, 2),
            )
        return result


def history_fragment(customer: CustomerRecord) -> str:
    """
    Name fragment used to look up a customer's past orders.

    First word of the company name with punctuation removed, so that
    "HeyTea (M) Sdn Bhd" searches for "HeyTea" and hits every branch.
    """
    words = customer.company_name.split()
    if not words:
        return ""
    return _NON_WORD.sub("", words[0])


# Singleton instance for convenience
_customer_resolver: Optional[CustomerResolver] = None

def get_customer_resolver() -> CustomerResolver:
    """Get or create CustomerResolver instance."""
    global _customer_resolver
    if _customer_resolver is None:
        _customer_resolver = CustomerResolver()
    return _customer_resolver
