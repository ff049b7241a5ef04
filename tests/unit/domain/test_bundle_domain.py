"""Tests unitarios para los modelos y value objects de dominio."""

from decimal import Decimal

import pytest

from niche_bundler.domain.models.bundle import BundleDomain, BundleLineItemDomain
from niche_bundler.domain.value_objects import DiscountSpec, DiscountType, Money, PriceResult


class TestMoney:
    def test_rounds_half_up_to_cents(self):
        assert Money(Decimal("19.995")).to_fixed() == "20.00"
        assert Money(Decimal("2.344")).to_fixed() == "2.34"

    def test_display_with_symbol(self):
        assert Money(Decimal("25")).display("$") == "$25.00"
        assert str(Money(Decimal("25"), "EUR")) == "EUR 25.00"

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            Money(Decimal("-1"))

    def test_invalid_currency_rejected(self):
        with pytest.raises(ValueError):
            Money(Decimal("1"), currency="DOLLARS")

    def test_amount_beyond_default_precision(self):
        assert Money(Decimal("1E+30")).to_fixed() == "1" + "0" * 30 + ".00"

    def test_negative_zero_prints_as_zero(self):
        assert Money(Decimal("-0.001")).to_fixed() == "0.00"


class TestDiscountSpec:
    def test_parse_known_and_unknown_types(self):
        assert DiscountType.parse("percentage") == DiscountType.PERCENTAGE
        assert DiscountType.parse(DiscountType.FIXED) == DiscountType.FIXED
        assert DiscountType.parse("bogo") is None
        assert DiscountType.parse(None) is None

    def test_percentage_above_100_rejected(self):
        with pytest.raises(ValueError):
            DiscountSpec(type=DiscountType.PERCENTAGE, value=Decimal("101"))

    def test_fixed_above_100_allowed(self):
        spec = DiscountSpec(type="fixed", value=250)
        assert spec.type == DiscountType.FIXED
        assert spec.value == Decimal("250")

    def test_negative_value_rejected(self):
        with pytest.raises(ValueError):
            DiscountSpec(type=DiscountType.FIXED, value=Decimal("-5"))

    def test_to_dict_is_flat(self):
        spec = DiscountSpec(type=DiscountType.PERCENTAGE, value=Decimal("20"))
        assert spec.to_dict() == {"discount_type": "percentage", "discount_value": 20.0}


class TestBundleLineItemDomain:
    def test_cart_item_prefers_variant(self):
        item = BundleLineItemDomain(product_id="1", variant_id="9", title="A", price=Decimal("1"), quantity=3)
        assert item.to_cart_item() == {"id": "9", "quantity": 3}

    def test_cart_item_falls_back_to_product(self):
        item = BundleLineItemDomain(product_id="1", title="A", price=Decimal("1"))
        assert item.to_cart_item() == {"id": "1", "quantity": 1}

    def test_invalid_quantity_rejected(self):
        with pytest.raises(ValueError):
            BundleLineItemDomain(product_id="1", title="A", price=Decimal("1"), quantity=0)

    def test_negative_price_rejected(self):
        with pytest.raises(ValueError):
            BundleLineItemDomain(product_id="1", title="A", price=Decimal("-1"))

    def test_from_dict_coerces_numeric_ids(self):
        item = BundleLineItemDomain.from_dict({"product_id": 42, "variant_id": 43, "title": "A", "price": 2.5})
        assert item.product_id == "42"
        assert item.variant_id == "43"
        assert item.price == Decimal("2.5")
        assert item.quantity == 1


class TestBundleDomain:
    def test_requires_products(self):
        with pytest.raises(ValueError):
            BundleDomain(
                title="Empty",
                handle="empty",
                products=[],
                discount=DiscountSpec(type=DiscountType.FIXED, value=Decimal("0")),
                shop_domain="example.myshopify.com",
            )

    def test_cart_items_keep_bundle_order(self, sample_bundle):
        assert sample_bundle.cart_items() == [
            {"id": "2001", "quantity": 2},
            {"id": "1002", "quantity": 1},
        ]

    def test_deactivate(self, sample_bundle):
        sample_bundle.deactivate()
        assert sample_bundle.active is False

    def test_wire_format_round_trip(self, sample_bundle):
        data = sample_bundle.to_dict()

        assert data["discount_type"] == "percentage"
        assert data["discount_value"] == 20.0
        assert data["products"][0]["price"] == 10.0
        assert BundleDomain.from_dict(data) == sample_bundle


class TestPriceResult:
    def test_from_dict_reads_fixed_strings(self):
        result = PriceResult.from_dict({"original_price": "25.00", "discount_amount": "5.00", "final_price": "20.00"})

        assert result.final_price == Money(Decimal("20"))
        assert result.to_dict()["discount_amount"] == "5.00"
