"""Tests unitarios para el motor de precios de bundles."""

from decimal import Decimal

import pytest

from niche_bundler.domain.value_objects import DiscountType
from niche_bundler.services.pricing_engine import (
    NormalizedDiscount,
    PricedLine,
    calculate_price,
    compute_price,
    normalize_discount,
    normalize_line_items,
    normalize_price,
    normalize_quantity,
    price_bundle,
)

SCENARIO_PRODUCTS = [{"price": 10, "quantity": 2}, {"price": 5, "quantity": 1}]


class TestScenarios:
    """Escenarios de referencia del cálculo de precio."""

    def test_percentage_discount(self):
        """Escenario A: 25.00 original, 20% → 5.00 de descuento, 20.00 final."""
        result = calculate_price(SCENARIO_PRODUCTS, "percentage", 20)

        assert result.to_dict() == {
            "original_price": "25.00",
            "discount_amount": "5.00",
            "final_price": "20.00",
        }

    def test_fixed_discount_larger_than_total(self):
        """Escenario B: el descuento fijo se reporta completo y el final queda en 0."""
        result = calculate_price(SCENARIO_PRODUCTS, "fixed", 30)

        assert result.to_dict() == {
            "original_price": "25.00",
            "discount_amount": "30.00",
            "final_price": "0.00",
        }

    def test_empty_products(self):
        result = calculate_price([], "percentage", 20)

        assert result.original_price.to_fixed() == "0.00"
        assert result.discount_amount.to_fixed() == "0.00"
        assert result.final_price.to_fixed() == "0.00"

    def test_fixed_discount_on_empty_products(self):
        result = calculate_price([], "fixed", 5)

        assert result.discount_amount.to_fixed() == "5.00"
        assert result.final_price.to_fixed() == "0.00"

    def test_idempotent(self):
        first = calculate_price(SCENARIO_PRODUCTS, "percentage", 20)
        second = calculate_price(SCENARIO_PRODUCTS, "percentage", 20)
        assert first == second


class TestDiscountRules:
    """Reglas de descuento."""

    def test_unknown_discount_type_means_no_discount(self):
        result = calculate_price(SCENARIO_PRODUCTS, "bogo", 50)

        assert result.discount_amount.to_fixed() == "0.00"
        assert result.final_price.to_fixed() == "25.00"

    def test_discount_type_is_case_sensitive(self):
        result = calculate_price(SCENARIO_PRODUCTS, "Percentage", 20)
        assert result.discount_amount.is_zero

    def test_missing_discount(self):
        result = calculate_price(SCENARIO_PRODUCTS, None, None)
        assert result.final_price.to_fixed() == "25.00"

    def test_percentage_above_100_is_not_clamped(self):
        """El motor no recorta porcentajes; solo el precio final se limita a 0."""
        result = calculate_price([{"price": 10, "quantity": 1}], "percentage", 150)

        assert result.discount_amount.to_fixed() == "15.00"
        assert result.final_price.to_fixed() == "0.00"

    def test_negative_discount_value_counts_as_zero(self):
        result = calculate_price(SCENARIO_PRODUCTS, "fixed", -10)

        assert result.discount_amount.to_fixed() == "0.00"
        assert result.final_price.to_fixed() == "25.00"

    def test_unreadable_discount_value_counts_as_zero(self):
        result = calculate_price(SCENARIO_PRODUCTS, "percentage", "lots")
        assert result.discount_amount.is_zero

    def test_discount_value_as_string(self):
        result = calculate_price(SCENARIO_PRODUCTS, "fixed", "7.5")
        assert result.final_price.to_fixed() == "17.50"


class TestRounding:
    """Redondeo half-up a dos decimales."""

    def test_half_up_rounding_of_original(self):
        result = calculate_price([{"price": 0.125, "quantity": 1}], None, None)
        assert result.original_price.to_fixed() == "0.13"

    def test_percentage_rounding(self):
        result = calculate_price([{"price": "19.99", "quantity": 1}], "percentage", 15)

        assert result.discount_amount.to_fixed() == "3.00"
        assert result.final_price.to_fixed() == "16.99"

    def test_sum_is_rounded_once(self):
        """Se suma a precisión completa y se redondea al final."""
        products = [{"price": "0.005", "quantity": 1}, {"price": "0.005", "quantity": 1}]
        result = calculate_price(products, None, None)
        assert result.original_price.to_fixed() == "0.01"


class TestNormalization:
    """Normalización de precios, cantidades y descuentos."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (12, Decimal("12")),
            (12.5, Decimal("12.5")),
            ("12.50", Decimal("12.50")),
            ("12.5 USD", Decimal("12.5")),
            ("abc", Decimal("0")),
            (None, Decimal("0")),
            (-3, Decimal("0")),
            (True, Decimal("0")),
            (float("nan"), Decimal("0")),
            (float("inf"), Decimal("0")),
            ({"amount": 1}, Decimal("0")),
        ],
    )
    def test_normalize_price(self, raw, expected):
        assert normalize_price(raw) == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (3, 3),
            ("2", 2),
            (2.9, 2),
            ("4 units", 4),
            (0, 1),
            (-2, 1),
            (None, 1),
            ("many", 1),
        ],
    )
    def test_normalize_quantity(self, raw, expected):
        assert normalize_quantity(raw) == expected

    def test_normalize_line_items_accepts_non_mappings(self):
        lines = normalize_line_items([{"price": 4, "quantity": 2}, "garbage", None])

        assert lines == [
            PricedLine(price=Decimal("4"), quantity=2),
            PricedLine(price=Decimal("0"), quantity=1),
            PricedLine(price=Decimal("0"), quantity=1),
        ]

    def test_missing_price_and_quantity(self):
        """Precio ausente cuenta como 0 y cantidad ausente como 1."""
        result = calculate_price([{"title": "No price"}, {"price": 8}], None, None)
        assert result.original_price.to_fixed() == "8.00"

    def test_normalize_discount(self):
        assert normalize_discount("fixed", "3") == NormalizedDiscount(type=DiscountType.FIXED, value=Decimal("3"))
        assert normalize_discount("other", 3) == NormalizedDiscount.none()


class TestComputePrice:
    def test_compute_price_with_normalized_values(self):
        lines = [PricedLine(price=Decimal("9.99"), quantity=3)]
        result = compute_price(lines, NormalizedDiscount(type=DiscountType.FIXED, value=Decimal("5")), currency="EUR")

        assert result.original_price.to_fixed() == "29.97"
        assert result.final_price.to_fixed() == "24.97"
        assert result.final_price.currency == "EUR"

    def test_price_bundle(self, sample_bundle):
        result = price_bundle(sample_bundle)

        assert result.to_dict() == {
            "original_price": "25.00",
            "discount_amount": "5.00",
            "final_price": "20.00",
        }


class TestLargeAmounts:
    """Montos enormes pero finitos no rompen el cálculo."""

    def test_price_beyond_default_precision(self):
        result = calculate_price([{"price": 1e30, "quantity": 1}], "percentage", 10)

        assert result.original_price.to_fixed() == "1" + "0" * 30 + ".00"
        assert result.discount_amount.to_fixed() == "1" + "0" * 29 + ".00"
        assert result.final_price.to_fixed() == "9" + "0" * 29 + ".00"

    def test_fixed_discount_beyond_default_precision(self):
        result = calculate_price([{"price": 10, "quantity": 1}], "fixed", "1e27")

        assert result.discount_amount.to_fixed() == "1" + "0" * 27 + ".00"
        assert result.final_price.to_fixed() == "0.00"

    def test_many_significant_digits_keep_cents(self):
        price = "1234567890123456789012345678.905"
        result = calculate_price([{"price": price, "quantity": 2}], None, None)

        assert result.original_price.to_fixed() == "2469135780246913578024691357.81"

    def test_exponent_out_of_range_counts_as_unreadable(self):
        assert normalize_price("1e9999999") == Decimal("0")
        assert normalize_quantity("1e9999999") == 1
        assert normalize_discount("fixed", "1e9999999").value == Decimal("0")
