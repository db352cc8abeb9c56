"""
Valuation Domain Models.

Immutable snapshots of orders, return requests and the results computed
from them. All amounts are integers in minor currency units.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple, Union


# =============================================================================
# ITEM DISCOUNT KINDS
# =============================================================================

@dataclass(frozen=True)
class NoDiscount:
    """Line sold at its stored unit price."""


@dataclass(frozen=True)
class BundlePromo:
    """Purchase-with-purchase add-on: extra per-unit discount on top of unit_price."""
    amount_per_unit: int


@dataclass(frozen=True)
class GlobalVariantMarkdown:
    """Storewide markdown set by an admin; unit_price is already marked down."""
    amount_per_unit: int


@dataclass(frozen=True)
class BulkTierPrice:
    """Wholesale quantity tier; unit_price is already the tier price."""


ItemDiscount = Union[NoDiscount, BundlePromo, GlobalVariantMarkdown, BulkTierPrice]


@dataclass(frozen=True)
class ItemAdjustment:
    """One entry of the order's per-item adjustment ledger (coupon lines)."""
    amount: int
    code: Optional[str] = None


# =============================================================================
# INPUTS
# =============================================================================

@dataclass(frozen=True)
class LineItem:
    """One purchased unit-group of an order."""
    id: str
    unit_price: int
    quantity: int
    original_unit_price: Optional[int] = None
    discounts: Tuple[ItemDiscount, ...] = ()
    adjustments: Tuple[ItemAdjustment, ...] = ()
    title: str = ""
    variant_id: Optional[str] = None

    def discounts_of(self, kind: type) -> Tuple[ItemDiscount, ...]:
        return tuple(d for d in self.discounts if isinstance(d, kind))

    def has_discount(self, kind: type) -> bool:
        return any(isinstance(d, kind) for d in self.discounts)


@dataclass(frozen=True)
class Order:
    """An order aggregate with its order-level adjustments."""
    id: str
    items: Tuple[LineItem, ...] = ()
    shipping_method_amount: int = 0
    free_shipping_applied: bool = False
    preferred_shipping_amount: Optional[int] = None
    tax_amount: int = 0
    coupon_code: Optional[str] = None
    raw_discount_total: int = 0
    points_discount_amount: int = 0
    points_redeemed: int = 0
    membership_promo_discount_amount: int = 0
    tier_discount_amount: int = 0
    tier_name: Optional[str] = None
    currency_code: str = "sgd"

    def item(self, item_id: str) -> Optional[LineItem]:
        for line in self.items:
            if line.id == item_id:
                return line
        return None


@dataclass(frozen=True)
class ReturnLine:
    """A selected line of a return with optional precision aids."""
    item_id: str
    requested_quantity: int
    full_return_refund_total: Optional[int] = None
    per_unit_refund: Optional[int] = None


@dataclass(frozen=True)
class ReturnRequest:
    """Items selected for return against one order."""
    order_id: str
    lines: Tuple[ReturnLine, ...] = ()
    shipping_refund: int = 0
    previously_returned: Mapping[str, int] = field(default_factory=dict)


# =============================================================================
# RESULTS
# =============================================================================

@dataclass(frozen=True)
class OrderValuation:
    """Canonical monetary breakdown of an order."""
    original_subtotal: int
    bundle_promo_discount: int
    variant_discount: int
    bulk_discount: int
    coupon_discount: int
    points_discount: int
    membership_promo_discount: int
    tier_discount: int
    effective_shipping: int
    tax: int
    total: int

    @property
    def item_discounts(self) -> int:
        return self.bundle_promo_discount + self.variant_discount + self.bulk_discount

    @property
    def subtotal_after_item_discounts(self) -> int:
        return self.original_subtotal - self.item_discounts

    @property
    def order_discounts(self) -> int:
        return (
            self.coupon_discount
            + self.points_discount
            + self.membership_promo_discount
            + self.tier_discount
        )

    @property
    def total_discounts(self) -> int:
        return self.item_discounts + self.order_discounts

    @property
    def paid_for_items(self) -> int:
        """What the customer paid for the goods, excluding shipping and tax."""
        return max(0, self.subtotal_after_item_discounts - self.order_discounts)

    def to_dict(self) -> Dict[str, int]:
        return {
            "original_subtotal": self.original_subtotal,
            "bundle_promo_discount": self.bundle_promo_discount,
            "variant_discount": self.variant_discount,
            "bulk_discount": self.bulk_discount,
            "subtotal_after_item_discounts": self.subtotal_after_item_discounts,
            "coupon_discount": self.coupon_discount,
            "points_discount": self.points_discount,
            "membership_promo_discount": self.membership_promo_discount,
            "tier_discount": self.tier_discount,
            "total_discounts": self.total_discounts,
            "effective_shipping": self.effective_shipping,
            "tax": self.tax,
            "total": self.total,
        }


@dataclass(frozen=True)
class ItemRefund:
    """Refund computed for one returned line."""
    item_id: str
    quantity: int
    effective_unit_price: int
    amount: int
    full_return: bool


@dataclass(frozen=True)
class RefundBreakdown:
    """Per-item refunds plus the caller-supplied shipping refund."""
    items: Tuple[ItemRefund, ...]
    total_items_refund: int
    shipping_refund: int

    @property
    def total_refund(self) -> int:
        return self.total_items_refund + self.shipping_refund

    def to_dict(self) -> Dict[str, object]:
        return {
            "items": [
                {
                    "item_id": r.item_id,
                    "quantity": r.quantity,
                    "effective_unit_price": r.effective_unit_price,
                    "refund_amount": r.amount,
                    "full_return": r.full_return,
                }
                for r in self.items
            ],
            "total_items_refund": self.total_items_refund,
            "shipping_refund": self.shipping_refund,
            "total_refund": self.total_refund,
        }


@dataclass(frozen=True)
class ReturnableLine:
    """What is left to return on a line, with its apportioned refund aids."""
    item_id: str
    title: str
    variant_id: Optional[str]
    unit_price: int
    purchased_quantity: int
    returned_quantity: int
    returnable_quantity: int
    refund_total: int
    refund_per_unit: int
    refund_remainder: int

    def to_dict(self) -> Dict[str, object]:
        return {
            "item_id": self.item_id,
            "product_name": self.title,
            "variant_id": self.variant_id,
            "unit_price": self.unit_price,
            "original_quantity": self.purchased_quantity,
            "returned_quantity": self.returned_quantity,
            "returnable_quantity": self.returnable_quantity,
            "refund_total": self.refund_total,
            "refund_per_unit": self.refund_per_unit,
            "refund_remainder": self.refund_remainder,
        }
