"""
Price Reconstructor.

Rebuilds what an order was really worth from its line items: the
pre-discount price of every line, each stacked discount bucket, the
effective shipping charge and the final total.

Every surface that shows money for an order (order card, order detail,
receipt, refund drawer) calls these functions rather than summing item
metadata itself. Ordering of the steps in compute_order_valuation matters:
item-level buckets are computed from the original price, the coupon is
derived after them, and the total is clamped once at the very end.
"""

import logging
from typing import Iterable

from .models import (
    BulkTierPrice,
    BundlePromo,
    GlobalVariantMarkdown,
    LineItem,
    Order,
    OrderValuation,
)

logger = logging.getLogger(__name__)


# =============================================================================
# PER-ITEM RESOLUTION
# =============================================================================

def bundle_promo_per_unit(item: LineItem) -> int:
    """Sum of bundle-promo (PWP) discounts recorded per unit."""
    return sum(d.amount_per_unit for d in item.discounts_of(BundlePromo))


def variant_markdown_per_unit(item: LineItem) -> int:
    """Sum of storewide variant markdowns recorded per unit."""
    return sum(d.amount_per_unit for d in item.discounts_of(GlobalVariantMarkdown))


def original_unit_price(item: LineItem) -> int:
    """
    Resolve a line's pre-discount unit price.

    1. The explicitly recorded original price.
    2. For rows written before original prices were stored, the marked-down
       unit price plus the variant markdown.
    3. The stored unit price.
    """
    if item.original_unit_price:
        return item.original_unit_price

    markdown = variant_markdown_per_unit(item)
    if markdown:
        return item.unit_price + markdown

    return item.unit_price


def effective_unit_price(item: LineItem) -> int:
    """
    Resolve what the customer paid per unit, before order-level discounts.

    Bundle-promo discounts come off the stored unit price. Variant markdowns
    and bulk tier prices are already reflected in unit_price.
    """
    return item.unit_price - bundle_promo_per_unit(item)


def bulk_discount_per_unit(item: LineItem) -> int:
    """
    Per-unit wholesale tier discount; zero unless the line is tier priced.

    A recorded original price at or below the tier price gives no discount.
    """
    if not item.has_discount(BulkTierPrice):
        return 0
    return max(0, original_unit_price(item) - item.unit_price)


# =============================================================================
# ORDER-LEVEL RESOLUTION
# =============================================================================

def adjustment_ledger_total(items: Iterable[LineItem]) -> int:
    """Sum of the per-item adjustment ledger across the order."""
    return sum(adj.amount for item in items for adj in item.adjustments)


def coupon_discount(order: Order, bundle_promo_discount: int) -> int:
    """
    Resolve the coupon share of the order's discounts.

    The raw discount total may already contain the bundle-promo and points
    discounts, so they are taken out before the remainder is treated as
    coupon. When the adjustment ledger carries its own figure it is used
    instead, unless it only restates the bundle-promo discount.

    NOTE: the raw-total heuristic does not know whether membership promo or
    tier discounts are folded into the raw total. It is kept as-is so stored
    and displayed figures stay comparable with historic orders.
    """
    if not order.coupon_code:
        return 0

    ledger = adjustment_ledger_total(order.items)
    if ledger > 0 and ledger != bundle_promo_discount:
        return ledger

    return max(0, order.raw_discount_total - bundle_promo_discount - order.points_discount_amount)


def effective_shipping(order: Order) -> int:
    """Shipping actually charged: waived, else the preferred quote, else nominal."""
    if order.free_shipping_applied:
        return 0
    if order.preferred_shipping_amount is not None:
        return order.preferred_shipping_amount
    return order.shipping_method_amount


# =============================================================================
# VALUATION
# =============================================================================

def compute_order_valuation(order: Order) -> OrderValuation:
    """
    Compute the authoritative monetary breakdown of an order.

    Args:
        order: The order snapshot with its line items

    Returns:
        OrderValuation with every discount bucket and the clamped total
    """
    original_subtotal = 0
    bundle = 0
    variant = 0
    bulk = 0

    for item in order.items:
        original_subtotal += original_unit_price(item) * item.quantity
        bundle += bundle_promo_per_unit(item) * item.quantity
        variant += variant_markdown_per_unit(item) * item.quantity
        bulk += bulk_discount_per_unit(item) * item.quantity

    subtotal_after_items = original_subtotal - bundle - variant - bulk

    coupon = coupon_discount(order, bundle)
    points = order.points_discount_amount
    membership = order.membership_promo_discount_amount
    tier = order.tier_discount_amount
    shipping = effective_shipping(order)
    tax = order.tax_amount

    total = max(
        0,
        subtotal_after_items - coupon - points - membership - tier + shipping + tax,
    )

    logger.debug(
        f"Valued order {order.id}: subtotal={original_subtotal} "
        f"item_discounts={bundle + variant + bulk} coupon={coupon} total={total}"
    )

    return OrderValuation(
        original_subtotal=original_subtotal,
        bundle_promo_discount=bundle,
        variant_discount=variant,
        bulk_discount=bulk,
        coupon_discount=coupon,
        points_discount=points,
        membership_promo_discount=membership,
        tier_discount=tier,
        effective_shipping=shipping,
        tax=tax,
        total=total,
    )
