"""Tests for mapping back-office records onto domain models."""

import pytest

from valuation.data.records import (
    line_item_from_record,
    order_from_record,
    return_request_from_record,
    stored_refund_fields,
    to_amount,
    to_flag,
    to_optional_amount,
)
from valuation.domain.models import BulkTierPrice, BundlePromo, GlobalVariantMarkdown
from valuation.domain.pricing import compute_order_valuation


class TestCoercion:
    """Optional fields degrade to defaults instead of failing."""

    def test_amounts(self):
        assert to_amount(None) == 0
        assert to_amount("250") == 250
        assert to_amount(99.6) == 100
        assert to_amount("n/a") == 0
        assert to_amount(True) == 0

    @pytest.mark.parametrize("value", ["inf", "-inf", "nan", 1e400, float("inf")])
    def test_out_of_range_amounts_default(self, value):
        assert to_amount(value) == 0
        assert to_optional_amount(value) is None

    def test_out_of_range_metadata_does_not_fail_the_order(self, variant_order_record):
        variant_order_record["items"][0]["metadata"].update({
            "is_pwp_item": True,
            "pwp_discount_amount": "inf",
        })
        variant_order_record["tax_total"] = "1e400"
        order = order_from_record(variant_order_record)

        assert order.items[0].discounts == (GlobalVariantMarkdown(200),)
        assert compute_order_valuation(order).total == 2500

    def test_flags(self):
        assert to_flag(True) is True
        assert to_flag("true") is True
        assert to_flag(1) is False
        assert to_flag(None) is False


class TestLineItemFromRecord:
    """Metadata bag to discount kinds."""

    def test_variant_row(self):
        item = line_item_from_record({
            "id": "i",
            "unit_price": 1000,
            "quantity": 2,
            "metadata": {"is_variant_discount": True, "variant_discount_amount": "200"},
        })
        assert item.discounts == (GlobalVariantMarkdown(200),)
        assert item.original_unit_price is None

    def test_bundle_and_bulk_rows(self):
        item = line_item_from_record({
            "id": "i",
            "unit_price": 450,
            "quantity": 1,
            "metadata": {
                "is_pwp_item": True,
                "pwp_discount_amount": 50,
                "is_bulk_price": True,
                "original_unit_price": 500,
            },
        })
        assert item.discounts == (BundlePromo(50), BulkTierPrice())
        assert item.original_unit_price == 500

    def test_amount_without_flag_is_ignored(self):
        item = line_item_from_record({
            "id": "i",
            "unit_price": 450,
            "quantity": 1,
            "metadata": {"pwp_discount_amount": 50, "variant_discount_amount": 20},
        })
        assert item.discounts == ()

    def test_legacy_original_price_key(self):
        item = line_item_from_record({
            "id": "i", "unit_price": 450, "quantity": 1,
            "metadata": {"original_price": 500, "is_wholesale_tier_discount": True},
        })
        assert item.original_unit_price == 500
        assert item.discounts == (BulkTierPrice(),)

    def test_missing_metadata(self):
        item = line_item_from_record({"id": "i", "unit_price": 100, "quantity": 1})
        assert item.discounts == ()
        assert item.adjustments == ()


class TestOrderFromRecord:
    """Order-level metadata."""

    def test_variant_record_values_like_the_domain_fixture(self, variant_order_record, variant_order):
        order = order_from_record(variant_order_record)
        assert compute_order_valuation(order) == compute_order_valuation(variant_order)

    def test_carrier_quote_becomes_preferred_shipping(self, variant_order_record):
        variant_order_record["metadata"]["easyparcel_shipping"] = {"price": 730, "courier_name": "J&T"}
        order = order_from_record(variant_order_record)
        assert order.preferred_shipping_amount == 730

    def test_coupon_code_from_metadata(self, variant_order_record):
        variant_order_record["metadata"]["coupon_code"] = "SPRING"
        assert order_from_record(variant_order_record).coupon_code == "SPRING"

    def test_order_discounts(self):
        order = order_from_record({
            "id": "o",
            "items": [],
            "discount_total": 700,
            "coupon_code": "X",
            "metadata": {
                "points_discount_amount": 100,
                "points_to_redeem": 1000,
                "applied_membership_promo_discount": "50",
                "tier_discount_amount": 25,
                "tier_name": "Gold",
                "free_shipping_applied": True,
            },
        })
        assert order.raw_discount_total == 700
        assert order.points_discount_amount == 100
        assert order.points_redeemed == 1000
        assert order.membership_promo_discount_amount == 50
        assert order.tier_discount_amount == 25
        assert order.tier_name == "Gold"
        assert order.free_shipping_applied is True

    def test_empty_record(self):
        order = order_from_record({})
        assert order.items == ()
        assert compute_order_valuation(order).total == 0


class TestReturnRecords:
    """Return drawer selections and stored return fields."""

    def test_selection(self):
        request = return_request_from_record(
            "o",
            [{"item_id": "a", "quantity": 2, "refund_total": 1999, "refund_per_unit": 999}],
            shipping_refund="300",
            previously_returned={"a": 1},
        )
        line = request.lines[0]
        assert line.requested_quantity == 2
        assert line.full_return_refund_total == 1999
        assert line.per_unit_refund == 999
        assert request.shipping_refund == 300
        assert request.previously_returned == {"a": 1}

    def test_stored_fields_are_read_not_recomputed(self):
        fields = stored_refund_fields({
            "refund_amount": 1500,
            "shipping_refund": 0,
            "total_refund": 1450,
            "pwp_discount": 100,
        })
        assert fields["total_refund"] == 1450
        assert fields["bundle_promo_discount"] == 100

    def test_missing_total_refund(self):
        fields = stored_refund_fields({"refund_amount": 1500, "shipping_refund": 200})
        assert fields["total_refund"] == 1700
