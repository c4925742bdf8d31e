"""
Quick-paste parsing configuration and scoring weights.

The numeric weights were tuned against real pasted WhatsApp orders.
Keep them as they are unless matching behaviour is deliberately changed.
"""

from dataclasses import dataclass, replace
from typing import Optional

# =============================================================================
# UNITS OF MEASURE
# =============================================================================

DEFAULT_UOM_VOCABULARY = (
    "KG", "CTN", "PCS", "PKT", "BKL", "BOX", "G", "TRAY", "BUNCH", "BAG", "ROLL",
)

# Used when the line has no unit and no product was matched
FALLBACK_UOM = "KG"

# Currency marker written in front of prices (Malaysian ringgit)
DEFAULT_CURRENCY_PREFIXES = ("RM",)

# Minutes an unconfirmed staging list stays in memory
DEFAULT_STAGING_TTL_MINUTES = 30


# =============================================================================
# SCORING WEIGHTS (0-100 scale)
# =============================================================================

# Normalized strings are identical
EXACT_MATCH_SCORE = 100

# One normalized string fully contains the other (customers only)
CONTAINMENT_SCORE = 80

# Ceiling for token-overlap scores: all tokens matched = 60
PARTIAL_MATCH_CEILING = 60

# Extra credit when the branch tokens also overlap (customers only)
BRANCH_BONUS_WEIGHT = 30

# Partial (substring) token hits count 80% of their length (products only)
PARTIAL_TOKEN_CREDIT = 0.8

# Product tokens shorter than this never earn partial credit
PARTIAL_TOKEN_MIN_LENGTH = 3


# =============================================================================
# ACCEPTANCE THRESHOLDS
# =============================================================================

CUSTOMER_MATCH_THRESHOLD = 30
PRODUCT_MATCH_THRESHOLD = 25

# Flat bonus for products the customer has ordered before
HISTORY_BOOST = 40

# Raw score a product needs before the history boost is applied
HISTORY_BOOST_MIN_SCORE = 20


# =============================================================================
# HISTORY LOOKUP / DELIVERY DATE
# =============================================================================

HISTORY_LOOKUP_LIMIT = 200

# Orders pasted from this hour on are for next-day delivery
ORDER_CUTOFF_HOUR = 10


@dataclass(frozen=True)
class ParsingConfig:
    """
    Overridable parsing configuration.

    Built from application settings by default; tests and callers can
    pass a modified copy (see with_overrides) to a single parse call.
    """
    uom_vocabulary: tuple[str, ...] = DEFAULT_UOM_VOCABULARY
    customer_match_threshold: float = CUSTOMER_MATCH_THRESHOLD
    product_match_threshold: float = PRODUCT_MATCH_THRESHOLD
    history_boost: float = HISTORY_BOOST
    history_boost_min_score: float = HISTORY_BOOST_MIN_SCORE
    default_uom: str = FALLBACK_UOM
    currency_prefixes: tuple[str, ...] = DEFAULT_CURRENCY_PREFIXES
    history_lookup_limit: int = HISTORY_LOOKUP_LIMIT
    order_cutoff_hour: int = ORDER_CUTOFF_HOUR

    @classmethod
    def from_settings(cls, app_settings: Optional[object] = None) -> "ParsingConfig":
        """
        Build config from application settings.

        Args:
            app_settings: Settings instance (defaults to the cached settings)

        Returns:
            ParsingConfig
        """
        if app_settings is None:
            from config.settings import get_settings
            app_settings = get_settings()

        return cls(
            uom_vocabulary=tuple(app_settings.uom_vocabulary),
            customer_match_threshold=app_settings.customer_match_threshold,
            product_match_threshold=app_settings.product_match_threshold,
            history_boost=app_settings.history_boost,
            history_boost_min_score=app_settings.history_boost_min_score,
            default_uom=app_settings.default_uom.upper(),
            currency_prefixes=tuple(app_settings.currency_prefixes),
            history_lookup_limit=app_settings.history_lookup_limit,
            order_cutoff_hour=app_settings.order_cutoff_hour,
        )

    def with_overrides(self, **overrides) -> "ParsingConfig":
        """Return a copy with the given fields replaced."""
        return replace(self, **overrides)
