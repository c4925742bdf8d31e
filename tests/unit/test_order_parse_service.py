"""
Unit tests for the order paste pipeline.

Covers customer header handling, delivery dates, product matching with
order history, UOM fallback and per-call configuration.
"""

from datetime import date, datetime
from decimal import Decimal
import pytest

from config.parsing import ParsingConfig
from models.catalog import ProductRecord
from models.staging import StagingKind
from services.order_parse_service import OrderParseService, default_delivery_date

MORNING = datetime(2026, 2, 24, 9, 0)
AFTER_CUTOFF = datetime(2026, 2, 24, 10, 0)


@pytest.fixture
def service():
    return OrderParseService(ParsingConfig())


@pytest.fixture
def chilli_products():
    return [
        ProductRecord(code="CH-RED", name="Red Chilli", base_uom="KG"),
        ProductRecord(code="CH-PADI", name="Chilli Padi", base_uom="KG"),
    ]


class RecordingFetcher:
    """History lookup stub that remembers the fragments it was asked for."""

    def __init__(self, codes=None, error=None):
        self.codes = codes or set()
        self.error = error
        self.fragments = []

    def __call__(self, fragment):
        self.fragments.append(fragment)
        if self.error:
            raise self.error
        return set(self.codes)


# ===================
# HEADER + ITEMS
# ===================

class TestOrderPaste:
    """End-to-end parsing of pasted orders."""

    def test_customer_and_items(self, service, customers, products):
        text = "HEYTEA GENTING\n2CTN MANGO GOLD SUSU\n5PCS avocado"

        result = service.parse(text, customers, products, now=MORNING)

        assert result.customer.display_name == "HeyTea - Genting"
        assert result.staging.customer_id == "2"

        first, second = result.staging.items
        assert (first.quantity, first.uom, first.matched_product_code) == (Decimal("2"), "CTN", "FR-MGS")
        assert (second.quantity, second.uom, second.matched_product_code) == (Decimal("5"), "PCS", "FR-AVO")
        assert result.has_unresolved is False
        assert result.resolved_count == 2

    def test_rows_keep_source_line_and_position(self, service, customers, products):
        text = "HEYTEA GENTING\n\n- Carrot 2kg  \n"

        result = service.parse(text, customers, products, now=MORNING)

        item = result.staging.items[0]
        assert item.raw_line == "- Carrot 2kg"
        assert item.line_index == 1

    def test_unmatched_line_is_staged_unresolved(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\nDurian 5", customers, products, now=MORNING)

        item = result.staging.items[0]
        assert item.matched_product_code is None
        assert item.match_score is None
        assert item.quantity == Decimal("5")
        assert item.uom == "KG"
        assert result.unresolved_count == 1

    def test_uom_falls_back_to_product_base_unit(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\navocado 5", customers, products, now=MORNING)

        item = result.staging.items[0]
        assert item.matched_product_code == "FR-AVO"
        assert item.uom == "PCS"

    def test_unknown_header_is_discarded(self, service, customers, products):
        result = service.parse("Good morning boss\nCarrot 2kg", customers, products, now=MORNING)

        assert result.customer is None
        assert result.staging.customer_id is None
        assert [i.raw_line for i in result.staging] == ["Carrot 2kg"]

    def test_item_like_first_line_is_kept(self, service, customers, products):
        result = service.parse("2kg carrot\nTomato 1kg", customers, products, now=MORNING)

        assert result.customer is None
        assert [i.matched_product_code for i in result.staging] == ["VG-CAR", "VG-TOM"]

    def test_empty_paste(self, service, customers, products):
        result = service.parse("  \n\n", customers, products, now=MORNING)

        assert len(result.staging) == 0
        assert result.customer is None
        assert result.delivery_date == date(2026, 2, 24)

    def test_staging_kind(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\nCarrot 2kg", customers, products, now=MORNING)

        assert result.staging.kind == StagingKind.ORDER
        assert result.staging.is_open


# ===================
# DELIVERY DATE
# ===================

class TestDeliveryDate:
    """Pasted date lines and the default delivery date."""

    def test_date_line_overrides_default(self, service, customers, products):
        text = "HEYTEA GENTING\n26/2/2026\nCarrot 2kg"

        result = service.parse(text, customers, products, now=MORNING)

        assert result.delivery_date_override == date(2026, 2, 26)
        assert result.delivery_date == date(2026, 2, 26)
        assert result.staging.delivery_date == date(2026, 2, 26)
        assert len(result.staging) == 1

    def test_yearless_date_uses_current_year(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\n3/3\nCarrot 2kg", customers, products, now=MORNING)

        assert result.delivery_date == date(2026, 3, 3)

    def test_invalid_date_becomes_unresolved_row(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\n31/2/2026", customers, products, now=MORNING)

        assert result.delivery_date_override is None
        assert len(result.staging) == 1
        assert result.staging.items[0].raw_line == "31/2/2026"
        assert result.unresolved_count == 1

    def test_before_cutoff_is_today(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\nCarrot 2kg", customers, products, now=MORNING)

        assert result.delivery_date_override is None
        assert result.delivery_date == date(2026, 2, 24)

    def test_after_cutoff_is_tomorrow(self, service, customers, products):
        result = service.parse("HEYTEA GENTING\nCarrot 2kg", customers, products, now=AFTER_CUTOFF)

        assert result.delivery_date == date(2026, 2, 25)

    def test_default_delivery_date_crosses_month(self):
        assert default_delivery_date(datetime(2026, 2, 28, 15, 30), 10) == date(2026, 3, 1)


# ===================
# ORDER HISTORY
# ===================

class TestOrderHistory:
    """History boost through the fetcher callback."""

    def test_history_promotes_past_product(self, service, customers, chilli_products):
        fetcher = RecordingFetcher(codes={"CH-RED"})

        result = service.parse(
            "HEYTEA GENTING\nchilli padi merah 2kg",
            customers,
            chilli_products,
            fetch_recent_product_codes=fetcher,
            now=MORNING,
        )

        assert fetcher.fragments == ["HeyTea"]
        assert result.history_codes == {"CH-RED"}
        assert result.staging.items[0].matched_product_code == "CH-RED"

    def test_without_history(self, service, customers, chilli_products):
        result = service.parse(
            "HEYTEA GENTING\nchilli padi merah 2kg", customers, chilli_products, now=MORNING
        )

        assert result.staging.items[0].matched_product_code == "CH-PADI"

    def test_history_failure_degrades_to_plain_matching(self, service, customers, chilli_products):
        fetcher = RecordingFetcher(error=RuntimeError("timeout"))

        result = service.parse(
            "HEYTEA GENTING\nchilli padi merah 2kg",
            customers,
            chilli_products,
            fetch_recent_product_codes=fetcher,
            now=MORNING,
        )

        assert fetcher.fragments == ["HeyTea"]
        assert result.history_codes == set()
        assert result.staging.items[0].matched_product_code == "CH-PADI"

    def test_no_lookup_without_customer(self, service, customers, products):
        fetcher = RecordingFetcher(codes={"VG-CAR"})

        service.parse(
            "Good morning boss\nCarrot 2kg",
            customers,
            products,
            fetch_recent_product_codes=fetcher,
            now=MORNING,
        )

        assert fetcher.fragments == []


# ===================
# CONFIGURATION
# ===================

class TestConfigOverride:
    """Per-call configuration."""

    def test_custom_vocabulary(self, service, customers, products):
        config = ParsingConfig().with_overrides(uom_vocabulary=("KG", "BIJI"))

        result = service.parse(
            "HEYTEA GENTING\nDurian 3 biji", customers, products, now=MORNING, config=config
        )

        item = result.staging.items[0]
        assert item.uom == "BIJI"
        assert item.quantity == Decimal("3")

    def test_custom_cutoff(self, service, customers, products):
        config = ParsingConfig().with_overrides(order_cutoff_hour=12)

        result = service.parse(
            "HEYTEA GENTING\nCarrot 2kg", customers, products, now=AFTER_CUTOFF, config=config
        )

        assert result.delivery_date == date(2026, 2, 24)

    def test_stricter_customer_threshold(self, service, customers, products):
        config = ParsingConfig().with_overrides(customer_match_threshold=90)

        result = service.parse(
            "HeyTea Sunway\nCarrot 2kg", customers, products, now=MORNING, config=config
        )

        assert result.customer is None

    def test_blank_rows_use_configured_default_uom(self, service, customers, products):
        config = ParsingConfig().with_overrides(default_uom="PCS")

        result = service.parse(
            "HEYTEA GENTING\nCarrot 2kg", customers, products, now=MORNING, config=config
        )

        assert result.staging.add_blank_row().uom == "PCS"
