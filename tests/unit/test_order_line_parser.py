"""
Unit tests for the order line parser.

Covers date lines, bullets, bracket notes, quantity/UOM extraction,
price extraction and the quantity-only fallback.
"""

from datetime import date
from decimal import Decimal
import pytest

from config.parsing import DEFAULT_UOM_VOCABULARY
from parsers.order_line_parser import (
    parse_order_line,
    parse_delivery_date,
    looks_like_item_line,
    strip_bullet,
    extract_trailing_note,
    clean_name_edges,
)


# ===================
# DATE LINE TESTS
# ===================

class TestDeliveryDate:
    """Tests for whole-line delivery date detection."""

    def test_full_date_with_slashes(self):
        assert parse_delivery_date("24/2/2026") == date(2026, 2, 24)

    def test_two_digit_year_is_2000s(self):
        assert parse_delivery_date("24-02-26") == date(2026, 2, 24)

    def test_dotted_date(self):
        assert parse_delivery_date("24.2.2026") == date(2026, 2, 24)

    def test_surrounding_whitespace(self):
        assert parse_delivery_date("  5/3/2026 ") == date(2026, 3, 5)

    def test_missing_year_uses_reference_year(self):
        """Short D/M form takes the year from the reference date."""
        assert parse_delivery_date("24/2", reference=date(2027, 1, 10)) == date(2027, 2, 24)

    def test_dotted_short_form_is_not_a_date(self):
        """"2.5" is a quantity or price, never a date."""
        assert parse_delivery_date("2.5") is None

    def test_invalid_calendar_date_returns_none(self):
        assert parse_delivery_date("31/2/2026") is None
        assert parse_delivery_date("12/13/2026") is None

    def test_date_with_other_text_is_not_a_date_line(self):
        assert parse_delivery_date("24/2/2026 morning") is None
        assert parse_delivery_date("Carrot 2kg") is None


# ===================
# HELPER TESTS
# ===================

class TestHelpers:
    """Tests for bullet, note and edge helpers."""

    @pytest.mark.parametrize("line,expected", [
        ("- Carrot 2kg", "Carrot 2kg"),
        ("* Carrot 2kg", "Carrot 2kg"),
        ("• Carrot 2kg", "Carrot 2kg"),
        ("1. Carrot 2kg", "Carrot 2kg"),
        ("12. Carrot 2kg", "Carrot 2kg"),
        ("Carrot 2kg", "Carrot 2kg"),
    ])
    def test_strip_bullet(self, line, expected):
        assert strip_bullet(line) == expected

    def test_extract_trailing_note(self):
        assert extract_trailing_note("Tomato (ripe)") == ("Tomato", "ripe")

    def test_note_must_be_trailing(self):
        assert extract_trailing_note("Tomato (ripe) 3kg") == ("Tomato (ripe) 3kg", "")

    def test_clean_name_edges(self):
        assert clean_name_edges("- Carrot -") == "Carrot"
        assert clean_name_edges(": Carrot:") == "Carrot"

    def test_looks_like_item_line(self):
        assert looks_like_item_line("2kg carrot") is True
        assert looks_like_item_line("- 3 ctn mango") is True
        assert looks_like_item_line("HEYTEA GENTING") is False


# ===================
# QUANTITY + UOM TESTS
# ===================

class TestQuantityAndUom:
    """Tests for <number><uom> extraction."""

    def test_unit_first(self):
        result = parse_order_line("2CTN MANGO GOLD SUSU")

        assert result.quantity == Decimal("2")
        assert result.uom == "CTN"
        assert result.price == Decimal("0")
        assert result.name_text == "MANGO GOLD SUSU"

    def test_unit_after_name(self):
        result = parse_order_line("avocado 5pcs")

        assert result.quantity == Decimal("5")
        assert result.uom == "PCS"
        assert result.name_text == "avocado"

    def test_space_between_number_and_unit(self):
        result = parse_order_line("Carrot 2 kg")

        assert result.quantity == Decimal("2")
        assert result.uom == "KG"
        assert result.name_text == "Carrot"

    def test_decimal_quantity(self):
        result = parse_order_line("Kangkung 1.5kg")

        assert result.quantity == Decimal("1.5")
        assert result.uom == "KG"

    def test_x_prefix(self):
        result = parse_order_line("1. Kangkung x 2 bkl")

        assert result.quantity == Decimal("2")
        assert result.uom == "BKL"
        assert result.name_text == "Kangkung"

    def test_name_ending_in_x(self):
        result = parse_order_line("Salad Mix 2kg")

        assert result.quantity == Decimal("2")
        assert result.uom == "KG"
        assert result.name_text == "Salad Mix"

    def test_kg_not_shadowed_by_g(self):
        result = parse_order_line("Ginger 3kg")

        assert result.uom == "KG"
        assert result.quantity == Decimal("3")

    def test_gram_unit(self):
        result = parse_order_line("Ginger 500g")

        assert result.uom == "G"
        assert result.quantity == Decimal("500")

    @pytest.mark.parametrize("uom", DEFAULT_UOM_VOCABULARY)
    def test_every_vocabulary_unit(self, uom):
        """<N><u> <product>, <product> <N><u> and <product> <N><u> <price>."""
        first = parse_order_line(f"3{uom.lower()} Carrot")
        middle = parse_order_line(f"Carrot   3 {uom}")
        priced = parse_order_line(f"Carrot 3{uom} 4.50")

        for result in (first, middle, priced):
            assert result.quantity == Decimal("3")
            assert result.uom == uom
            assert result.name_text == "Carrot"

        assert first.price == Decimal("0")
        assert middle.price == Decimal("0")
        assert priced.price == Decimal("4.50")

    def test_trailing_text_that_is_not_a_price_rejoins_name(self):
        """Words after the unit rejoin the name."""
        result = parse_order_line("Tomato 2kg besar")

        assert result.quantity == Decimal("2")
        assert result.price == Decimal("0")
        assert result.name_text == "Tomato besar"

    def test_custom_vocabulary(self):
        result = parse_order_line("Durian 2 biji", vocabulary=("KG", "BIJI"))

        assert result.quantity == Decimal("2")
        assert result.uom == "BIJI"
        assert result.name_text == "Durian"


# ===================
# PRICE TESTS
# ===================

class TestPrice:
    """Tests for price extraction."""

    def test_currency_prefixed_price(self):
        result = parse_order_line("avocado 5pcs RM12.50")

        assert result.price == Decimal("12.50")
        assert result.name_text == "avocado"

    def test_currency_with_space(self):
        result = parse_order_line("Carrot 2kg rm 8")

        assert result.price == Decimal("8")

    def test_bare_decimal_price(self):
        result = parse_order_line("Carrot 2kg 3.50")

        assert result.price == Decimal("3.50")
        assert result.name_text == "Carrot"

    def test_bare_integer_is_not_a_price(self):
        result = parse_order_line("Carrot 2kg 3")

        assert result.price == Decimal("0")
        assert result.name_text == "Carrot 3"

    def test_fallback_price_without_unit(self):
        """Name then price, no unit."""
        result = parse_order_line("Limau nipis RM 4.50")

        assert result.quantity == Decimal("1")
        assert result.price == Decimal("4.50")
        assert result.name_text == "Limau nipis"

    def test_unit_first_with_trailing_price(self):
        result = parse_order_line("2CTN MANGO GOLD SUSU RM 45")

        assert result.quantity == Decimal("2")
        assert result.price == Decimal("45")
        assert result.name_text == "MANGO GOLD SUSU"


# ===================
# FALLBACK TESTS
# ===================

class TestFallbacks:
    """Tests for lines without a unit."""

    def test_quantity_only(self):
        result = parse_order_line("avocado 5")

        assert result.quantity == Decimal("5")
        assert result.uom == ""
        assert result.name_text == "avocado"

    def test_quantity_with_x(self):
        result = parse_order_line("mango x2")

        assert result.quantity == Decimal("2")
        assert result.name_text == "mango"

    def test_quantity_after_name_ending_in_x(self):
        result = parse_order_line("Salad Mix 5")

        assert result.quantity == Decimal("5")
        assert result.name_text == "Salad Mix"

    def test_bracket_note_kept_for_matching(self):
        result = parse_order_line("- Tomato 3 kg (ripe)")

        assert result.name_text == "Tomato"
        assert result.note == "ripe"
        assert result.match_text == "Tomato (ripe)"

    def test_plain_text_defaults(self):
        result = parse_order_line("Thank you boss")

        assert result.quantity == Decimal("1")
        assert result.uom == ""
        assert result.price == Decimal("0")
        assert result.name_text == "Thank you boss"

    @pytest.mark.parametrize("line", ["", "   ", "----", "(((", "RM", "x", "1."])
    def test_malformed_lines_never_raise(self, line):
        result = parse_order_line(line)
        assert result.raw_line == line

    def test_raw_line_preserved(self):
        result = parse_order_line("  - Carrot 2kg  ")
        assert result.raw_line == "  - Carrot 2kg  "
