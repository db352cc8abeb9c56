"""
Record Mapping.

Orders reach this service as loosely typed records: line items carry a
metadata bag of optional discount flags and amounts, and order-level
discounts live in the order's own metadata. This module maps those records
onto the immutable domain models.

Missing or malformed optional fields are not errors. Amounts default to
zero and flags to false so incomplete legacy rows still value correctly.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..domain.models import (
    BulkTierPrice,
    BundlePromo,
    GlobalVariantMarkdown,
    ItemAdjustment,
    ItemDiscount,
    LineItem,
    Order,
    ReturnLine,
    ReturnRequest,
)

logger = logging.getLogger(__name__)


# =============================================================================
# FIELD COERCION
# =============================================================================

def to_amount(value: Any, default: int = 0) -> int:
    """Coerce a record value to an integer minor-unit amount."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Defaulting non-numeric amount {value!r} to {default}")
        return default


def to_optional_amount(value: Any) -> Optional[int]:
    """Like to_amount, but absent or unreadable values stay None."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    try:
        return int(round(float(value)))
    except (TypeError, ValueError, OverflowError):
        logger.debug(f"Ignoring non-numeric amount {value!r}")
        return None


def to_flag(value: Any) -> bool:
    """Only a literal true (or the string "true") sets a flag."""
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


# =============================================================================
# ORDERS
# =============================================================================

def item_discounts_from_metadata(metadata: Mapping[str, Any]) -> List[ItemDiscount]:
    """Translate a line item's metadata flags into discount kinds."""
    discounts: List[ItemDiscount] = []

    if to_flag(metadata.get("is_pwp_item")):
        amount = to_amount(metadata.get("pwp_discount_amount"))
        if amount > 0:
            discounts.append(BundlePromo(amount_per_unit=amount))

    if to_flag(metadata.get("is_variant_discount")):
        amount = to_amount(metadata.get("variant_discount_amount"))
        if amount > 0:
            discounts.append(GlobalVariantMarkdown(amount_per_unit=amount))

    if to_flag(metadata.get("is_bulk_price")) or to_flag(metadata.get("is_wholesale_tier_discount")):
        discounts.append(BulkTierPrice())

    return discounts


def line_item_from_record(record: Mapping[str, Any]) -> LineItem:
    """Build a LineItem from an order item record."""
    metadata = record.get("metadata") or {}
    original = to_optional_amount(metadata.get("original_unit_price"))
    if original is None:
        original = to_optional_amount(metadata.get("original_price"))

    adjustments = tuple(
        ItemAdjustment(amount=to_amount(adj.get("amount")), code=adj.get("code"))
        for adj in record.get("adjustments") or []
    )

    return LineItem(
        id=str(record.get("id") or ""),
        unit_price=to_amount(record.get("unit_price")),
        quantity=to_amount(record.get("quantity")),
        original_unit_price=original,
        discounts=tuple(item_discounts_from_metadata(metadata)),
        adjustments=adjustments,
        title=record.get("title") or record.get("product_name") or "",
        variant_id=record.get("variant_id"),
    )


def order_from_record(record: Mapping[str, Any], default_currency: str = "sgd") -> Order:
    """
    Build an Order from an order record.

    Args:
        record: Order record with items, totals and a metadata bag
        default_currency: Currency used when the record carries none

    Returns:
        The immutable Order snapshot
    """
    metadata = record.get("metadata") or {}
    carrier = metadata.get("easyparcel_shipping") or {}
    preferred = None
    if isinstance(carrier, Mapping) and isinstance(carrier.get("price"), (int, float)):
        preferred = to_optional_amount(carrier.get("price"))

    coupon_code = record.get("coupon_code") or metadata.get("coupon_code") or None

    return Order(
        id=str(record.get("id") or ""),
        items=tuple(line_item_from_record(item) for item in record.get("items") or []),
        shipping_method_amount=to_amount(record.get("shipping_total")),
        free_shipping_applied=to_flag(metadata.get("free_shipping_applied")),
        preferred_shipping_amount=preferred,
        tax_amount=to_amount(record.get("tax_total")),
        coupon_code=coupon_code,
        raw_discount_total=to_amount(record.get("discount_total")),
        points_discount_amount=to_amount(metadata.get("points_discount_amount")),
        points_redeemed=to_amount(metadata.get("points_to_redeem")),
        membership_promo_discount_amount=to_amount(metadata.get("applied_membership_promo_discount")),
        tier_discount_amount=to_amount(metadata.get("tier_discount_amount")),
        tier_name=metadata.get("tier_name"),
        currency_code=(record.get("currency_code") or default_currency).lower(),
    )


# =============================================================================
# RETURNS
# =============================================================================

def return_request_from_record(
    order_id: str,
    items: Iterable[Mapping[str, Any]],
    shipping_refund: Any = 0,
    previously_returned: Optional[Mapping[str, int]] = None,
) -> ReturnRequest:
    """
    Build a ReturnRequest from the return drawer's selected items.

    Each item is {item_id, quantity} with optional refund_total and
    refund_per_unit precision aids.
    """
    lines = tuple(
        ReturnLine(
            item_id=str(item.get("item_id") or ""),
            requested_quantity=to_amount(item.get("quantity")),
            full_return_refund_total=to_optional_amount(item.get("refund_total")),
            per_unit_refund=to_optional_amount(item.get("refund_per_unit")),
        )
        for item in items
    )
    return ReturnRequest(
        order_id=order_id,
        lines=lines,
        shipping_refund=to_amount(shipping_refund),
        previously_returned=dict(previously_returned or {}),
    )


def stored_refund_fields(record: Mapping[str, Any]) -> Dict[str, int]:
    """Read the refund figures persisted on a return record."""
    refund_amount = to_amount(record.get("refund_amount"))
    shipping_refund = to_amount(record.get("shipping_refund"))
    total_refund = to_optional_amount(record.get("total_refund"))
    return {
        "refund_amount": refund_amount,
        "shipping_refund": shipping_refund,
        "total_refund": total_refund if total_refund is not None else refund_amount + shipping_refund,
        "original_order_total": to_amount(record.get("original_order_total")),
        "coupon_discount": to_amount(record.get("coupon_discount")),
        "points_discount": to_amount(record.get("points_discount")),
        "bundle_promo_discount": to_amount(record.get("pwp_discount")),
    }
