"""Tests for the Price Reconstructor."""

from dataclasses import replace

import pytest

from valuation.domain.models import (
    BulkTierPrice,
    BundlePromo,
    GlobalVariantMarkdown,
    ItemAdjustment,
    LineItem,
    Order,
)
from valuation.domain.pricing import (
    bulk_discount_per_unit,
    compute_order_valuation,
    coupon_discount,
    effective_shipping,
    effective_unit_price,
    original_unit_price,
)

from conftest import bulk_item, bundle_item, variant_item


class TestOriginalUnitPrice:
    """Resolution order for a line's pre-discount price."""

    def test_explicit_original_price_wins(self):
        """A recorded original price is used even with a variant markdown present."""
        item = replace(variant_item(), original_unit_price=1250)
        assert original_unit_price(item) == 1250

    def test_legacy_variant_row_adds_markdown_back(self):
        """Without an original price, unit price plus markdown is the original."""
        assert original_unit_price(variant_item()) == 1200

    def test_zero_original_price_is_treated_as_missing(self):
        """Legacy rows store 0 when no original price was captured."""
        item = replace(variant_item(), original_unit_price=0)
        assert original_unit_price(item) == 1200

    def test_plain_item_falls_back_to_unit_price(self):
        """No discount tags means the stored price is the original."""
        item = LineItem(id="a", unit_price=799, quantity=1)
        assert original_unit_price(item) == 799

    def test_zero_variant_markdown_is_ignored(self):
        """A markdown of zero does not change the original price."""
        item = LineItem(
            id="a", unit_price=799, quantity=1,
            discounts=(GlobalVariantMarkdown(amount_per_unit=0),),
        )
        assert original_unit_price(item) == 799


class TestEffectiveUnitPrice:
    """What the customer paid per unit before order-level discounts."""

    def test_bundle_promo_is_taken_off(self):
        assert effective_unit_price(bundle_item()) == 1200

    def test_variant_markdown_already_in_unit_price(self):
        assert effective_unit_price(variant_item()) == 1000

    def test_bulk_tier_already_in_unit_price(self):
        assert effective_unit_price(bulk_item()) == 450

    def test_bulk_discount_per_unit(self):
        assert bulk_discount_per_unit(bulk_item()) == 50

    def test_bulk_discount_without_flag_is_zero(self):
        item = replace(bulk_item(), discounts=())
        assert bulk_discount_per_unit(item) == 0


class TestCouponDiscount:
    """Coupon derivation without double counting."""

    def _order(self, **kwargs) -> Order:
        defaults = dict(
            id="o",
            items=(bundle_item(quantity=2),),  # bundle discount 600
            coupon_code="SAVE10",
            raw_discount_total=1500,
            points_discount_amount=400,
        )
        defaults.update(kwargs)
        return Order(**defaults)

    def test_no_coupon_code_means_no_coupon_discount(self):
        order = self._order(coupon_code=None)
        assert coupon_discount(order, 600) == 0

    def test_bundle_and_points_are_subtracted_from_raw_total(self):
        """The raw ledger already contains bundle and points discounts."""
        order = self._order()
        assert coupon_discount(order, 600) == 1500 - 600 - 400

    def test_heuristic_never_goes_negative(self):
        order = self._order(raw_discount_total=500)
        assert coupon_discount(order, 600) == 0

    def test_adjustment_ledger_preferred_when_present(self):
        item = replace(
            bundle_item(quantity=2),
            adjustments=(ItemAdjustment(amount=250, code="SAVE10"), ItemAdjustment(amount=100)),
        )
        order = self._order(items=(item,))
        assert coupon_discount(order, 600) == 350

    def test_ledger_equal_to_bundle_discount_falls_back_to_heuristic(self):
        """A ledger that only restates the bundle discount is not a coupon figure."""
        item = replace(bundle_item(quantity=2), adjustments=(ItemAdjustment(amount=600),))
        order = self._order(items=(item,))
        valuation = compute_order_valuation(order)
        assert valuation.bundle_promo_discount == 600
        assert valuation.coupon_discount == 1500 - 600 - 400
        assert valuation.coupon_discount != order.raw_discount_total


class TestEffectiveShipping:
    """Shipping waiver and carrier quote precedence."""

    def test_nominal_amount_by_default(self):
        assert effective_shipping(Order(id="o", shipping_method_amount=500)) == 500

    def test_preferred_amount_overrides_nominal(self):
        order = Order(id="o", shipping_method_amount=1, preferred_shipping_amount=650)
        assert effective_shipping(order) == 650

    def test_preferred_zero_is_still_an_override(self):
        order = Order(id="o", shipping_method_amount=500, preferred_shipping_amount=0)
        assert effective_shipping(order) == 0

    def test_free_shipping_beats_everything(self):
        order = Order(
            id="o",
            shipping_method_amount=500,
            preferred_shipping_amount=650,
            free_shipping_applied=True,
        )
        assert effective_shipping(order) == 0


class TestComputeOrderValuation:
    """End-to-end valuation scenarios."""

    def test_variant_markdown_scenario(self, variant_order):
        valuation = compute_order_valuation(variant_order)

        assert valuation.original_subtotal == 2400
        assert valuation.variant_discount == 400
        assert valuation.subtotal_after_item_discounts == 2000
        assert valuation.coupon_discount == 0
        assert valuation.effective_shipping == 500
        assert valuation.tax == 70
        assert valuation.total == 2570

    def test_variant_markdown_with_free_shipping(self, variant_order):
        valuation = compute_order_valuation(replace(variant_order, free_shipping_applied=True))
        assert valuation.effective_shipping == 0
        assert valuation.total == 2070

    def test_empty_order_is_shipping_plus_tax(self):
        valuation = compute_order_valuation(Order(id="o", shipping_method_amount=300, tax_amount=21))

        assert valuation.original_subtotal == 0
        assert valuation.item_discounts == 0
        assert valuation.order_discounts == 0
        assert valuation.total == 321

    def test_every_discount_kind_stacks(self):
        order = Order(
            id="o",
            items=(variant_item(), bundle_item(), bulk_item()),
            shipping_method_amount=500,
            tax_amount=0,
            coupon_code="WELCOME",
            raw_discount_total=1000,
            points_discount_amount=100,
            membership_promo_discount_amount=200,
            tier_discount_amount=150,
        )
        valuation = compute_order_valuation(order)

        # 2400 + 1500 + 5000
        assert valuation.original_subtotal == 8900
        assert valuation.bundle_promo_discount == 300
        assert valuation.variant_discount == 400
        assert valuation.bulk_discount == 500
        assert valuation.subtotal_after_item_discounts == 7700
        assert valuation.coupon_discount == 1000 - 300 - 100
        assert valuation.total == 7700 - 600 - 100 - 200 - 150 + 500

    def test_combined_legacy_tags_are_all_counted(self):
        """Bundle and variant tags on one line are both summed."""
        item = LineItem(
            id="a",
            unit_price=1000,
            quantity=1,
            discounts=(GlobalVariantMarkdown(amount_per_unit=100), BundlePromo(amount_per_unit=50)),
        )
        valuation = compute_order_valuation(Order(id="o", items=(item,)))

        assert valuation.original_subtotal == 1100
        assert valuation.variant_discount == 100
        assert valuation.bundle_promo_discount == 50
        assert valuation.total == 950

    def test_total_is_clamped_only_at_the_end(self):
        """Large discounts give zero, and intermediate values are not clamped."""
        order = Order(
            id="o",
            items=(LineItem(id="a", unit_price=1000, quantity=1),),
            points_discount_amount=800,
            tier_discount_amount=800,
            shipping_method_amount=500,
        )
        valuation = compute_order_valuation(order)
        # 1000 - 1600 + 500 = -100 -> 0; clamping after points would give 500
        assert valuation.total == 0

    def test_idempotent(self, variant_order):
        assert compute_order_valuation(variant_order) == compute_order_valuation(variant_order)


class TestValuationProperties:
    """Monotonicity and non-negativity over order-level discount fields."""

    BASE = Order(
        id="o",
        items=(variant_item(), bundle_item(quantity=2), bulk_item()),
        shipping_method_amount=500,
        tax_amount=100,
        coupon_code="X",
        raw_discount_total=900,
    )

    @pytest.mark.parametrize("field_name", [
        "points_discount_amount",
        "membership_promo_discount_amount",
        "tier_discount_amount",
        "raw_discount_total",
    ])
    @pytest.mark.parametrize("amount", [1, 250, 100_000])
    def test_adding_a_discount_never_increases_total(self, field_name, amount):
        before = compute_order_valuation(self.BASE).total
        bumped = replace(self.BASE, **{field_name: getattr(self.BASE, field_name) + amount})
        assert compute_order_valuation(bumped).total <= before

    def test_adding_a_bundle_promo_never_increases_total(self):
        before = compute_order_valuation(self.BASE).total
        item = replace(variant_item(), discounts=variant_item().discounts + (BundlePromo(75),))
        bumped = replace(self.BASE, items=(item,) + self.BASE.items[1:])
        assert compute_order_valuation(bumped).total <= before

    @pytest.mark.parametrize("item, tag", [
        (LineItem(id="a", unit_price=450, quantity=10), BundlePromo(50)),
        (LineItem(id="a", unit_price=450, quantity=10), GlobalVariantMarkdown(50)),
        (LineItem(id="a", unit_price=450, quantity=10, original_unit_price=600), GlobalVariantMarkdown(50)),
        (LineItem(id="a", unit_price=450, quantity=10, original_unit_price=500), BulkTierPrice()),
        (LineItem(id="a", unit_price=450, quantity=10, original_unit_price=400), BulkTierPrice()),
        (LineItem(id="a", unit_price=450, quantity=10), BulkTierPrice()),
    ])
    def test_adding_an_item_tag_never_increases_total(self, item, tag):
        before = compute_order_valuation(replace(self.BASE, items=(item,))).total
        tagged = replace(item, discounts=item.discounts + (tag,))
        valuation = compute_order_valuation(replace(self.BASE, items=(tagged,)))

        assert valuation.total <= before
        assert valuation.bulk_discount >= 0

    def test_stale_original_below_tier_price_gives_no_bulk_discount(self):
        """An original price recorded below the tier price is not a discount."""
        item = LineItem(
            id="a", unit_price=450, quantity=10,
            original_unit_price=400, discounts=(BulkTierPrice(),),
        )
        assert bulk_discount_per_unit(item) == 0

    def test_pathological_discounts_stay_non_negative(self):
        order = replace(
            self.BASE,
            points_discount_amount=10**9,
            membership_promo_discount_amount=10**9,
            tier_discount_amount=10**9,
        )
        assert compute_order_valuation(order).total == 0
