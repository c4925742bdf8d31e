"""
Unit tests for supplier price-list parsing.

Covers the line parser and the staging pipeline: pack tokens, prices,
dropped lines and supplier detection.
"""

from decimal import Decimal
import pytest

from config.parsing import ParsingConfig
from models.staging import StagingKind
from parsers.price_list_parser import parse_price_line, is_skippable_line
from services.price_list_service import PriceListService


@pytest.fixture
def service():
    return PriceListService(ParsingConfig())


PASTED_PRICE_LIST = """Ah Seng Trading price list 24/2
*SAYUR*
Carrot 4.5kg 15
Cherry tomato 250g x 10pkt 38
Durian 1kg 20
Carrot 15
Carrot 1kg 0

Price: ex-farm, cash on delivery"""


# ===================
# LINE PARSER TESTS
# ===================

class TestParsePriceLine:
    """Tests for one price-list line."""

    def test_pack_and_price(self):
        result = parse_price_line("Carrot 4.5kg 15")

        assert result.name_text == "Carrot"
        assert result.uom == "4.5kg"
        assert result.price == Decimal("15")

    def test_pack_of_n(self):
        result = parse_price_line("Cherry tomato 250g x 10pkt 38")

        assert result.name_text == "Cherry tomato"
        assert result.uom == "250g x 10pkt"
        assert result.price == Decimal("38")

    def test_currency_prefixed_price(self):
        result = parse_price_line("Kangkung 1kg RM6.50")

        assert result.uom == "1kg"
        assert result.price == Decimal("6.50")

    def test_dash_separated(self):
        result = parse_price_line("Tomato - 1kg - 5.20")

        assert result.name_text == "Tomato"
        assert result.price == Decimal("5.20")

    def test_digits_inside_words_are_not_prices(self):
        result = parse_price_line("Carrot 4.5kg grade2 15")

        assert result.name_text == "Carrot"
        assert result.price == Decimal("15")

    def test_only_digits_inside_words(self):
        assert parse_price_line("Carrot 4.5kg grade2") is None

    def test_no_unit(self):
        assert parse_price_line("Carrot 15") is None

    def test_no_price(self):
        assert parse_price_line("Carrot 1kg") is None

    @pytest.mark.parametrize("line", [
        "*SAYUR*",
        "* BUAH 1kg 5 *",
        "Price: ex-farm",
        "All PRICE: subject to change 1kg 5",
    ])
    def test_headers_and_explanations_are_skipped(self, line):
        assert is_skippable_line(line) is True
        assert parse_price_line(line) is None


# ===================
# SERVICE TESTS
# ===================

class TestPriceListService:
    """Tests for the price-list staging pipeline."""

    def test_single_line(self, service, products):
        result = service.parse("Carrot 4.5kg 15", products)

        assert len(result.staging) == 1
        item = result.staging.items[0]
        assert item.matched_product_code == "VG-CAR"
        assert item.matched_product_name == "Carrot"
        assert item.uom == "4.5kg"
        assert item.price == Decimal("15")

    def test_unknown_product_produces_no_row(self, service, products):
        result = service.parse("Durian 1kg 20", products)

        assert len(result.staging) == 0
        assert result.dropped_count == 1

    def test_full_paste(self, service, products, suppliers):
        result = service.parse(PASTED_PRICE_LIST, products, suppliers)

        codes = [i.matched_product_code for i in result.staging]
        assert codes == ["VG-CAR", "VG-CTM"]
        assert result.dropped_count == 6
        assert result.staging.kind == StagingKind.PRICE_LIST

    def test_supplier_detected_from_first_line(self, service, products, suppliers):
        result = service.parse(PASTED_PRICE_LIST, products, suppliers)

        assert result.supplier.name == "Ah Seng Trading"
        assert result.staging.supplier_name == "Ah Seng Trading"

    def test_supplier_left_empty_without_registry(self, service, products):
        result = service.parse(PASTED_PRICE_LIST, products)

        assert result.supplier is None
        assert result.staging.supplier_name is None

    def test_rows_keep_source_line(self, service, products):
        result = service.parse("*SAYUR*\nKangkung 1kg RM6.50", products)

        item = result.staging.items[0]
        assert item.raw_line == "Kangkung 1kg RM6.50"
        assert item.line_index == 1

    def test_price_rows_are_never_unresolved(self, service, products, suppliers):
        result = service.parse(PASTED_PRICE_LIST, products, suppliers)

        assert result.staging.has_unresolved is False

    def test_reparse_gives_same_rows(self, service, products, suppliers):
        first = service.parse(PASTED_PRICE_LIST, products, suppliers)
        second = service.parse(PASTED_PRICE_LIST, products, suppliers)

        assert [i.raw_line for i in first.staging] == [i.raw_line for i in second.staging]
        assert first.dropped_count == second.dropped_count

    def test_empty_paste(self, service, products):
        result = service.parse("", products)

        assert len(result.staging) == 0
        assert result.dropped_count == 0
