"""
Order Summary Composer.

Turns valuation and refund results into display rows for the order card,
order detail drawer, return drawer and return detail screens. All
arithmetic has already happened in the domain layer; nothing here adds or
subtracts amounts.
"""

from typing import Any, Callable, Dict, List, Mapping, Optional

from core.presentation import (
    DisplayRow,
    DisplayTheme,
    SummaryComposer,
    TextFormatter,
)

from ..domain.models import OrderValuation, RefundBreakdown


class OrderSummaryComposer(SummaryComposer):
    """
    Composer for the order and return money summaries.

    Discount rows are only emitted when non-zero, matching the order
    detail drawer.
    """

    def __init__(self, theme: Optional[DisplayTheme] = None):
        super().__init__(theme=theme)

    def get_composers(self) -> Dict[str, Callable]:
        return {
            "order_summary": self.compose_order_summary,
            "refund_quote": self.compose_refund_quote,
            "return_detail": self.compose_return_detail,
        }

    # =========================================================================
    # ORDER SUMMARY
    # =========================================================================

    def compose_order_summary(
        self,
        valuation: OrderValuation,
        coupon_code: Optional[str] = None,
        tier_name: Optional[str] = None,
        free_shipping: bool = False,
    ) -> List[DisplayRow]:
        """
        Build the subtotal / discounts / shipping / tax / total rows.

        Args:
            valuation: The order's valuation
            coupon_code: Coupon to name on the coupon row
            tier_name: Membership tier to name on the tier row
            free_shipping: Whether the shipping waiver applied

        Returns:
            Ordered display rows
        """
        rows = [self._amount_row("subtotal", "Subtotal", valuation.original_subtotal)]

        discounts = [
            ("bundle_promo_discount", "PWP Discount", valuation.bundle_promo_discount),
            ("variant_discount", "Product Discount", valuation.variant_discount),
            ("bulk_discount", "Wholesale Discount", valuation.bulk_discount),
            (
                "coupon_discount",
                f"Coupon ({coupon_code})" if coupon_code else "Coupon",
                valuation.coupon_discount,
            ),
            ("points_discount", "Points Redeemed", valuation.points_discount),
            ("membership_promo_discount", "Membership Promo", valuation.membership_promo_discount),
            (
                "tier_discount",
                f"{tier_name} Tier Discount" if tier_name else "Tier Discount",
                valuation.tier_discount,
            ),
        ]
        for key, label, amount in discounts:
            if amount:
                rows.append(self._discount_row(key, label, amount))

        if free_shipping:
            rows.append(DisplayRow(
                key="shipping",
                label="Shipping",
                amount=0,
                display=self.theme.free_label,
            ))
        else:
            rows.append(self._amount_row("shipping", "Shipping", valuation.effective_shipping))

        rows.append(self._amount_row("tax", "Tax", valuation.tax))
        rows.append(self._total_row("total", "Total", valuation.total))
        return rows

    # =========================================================================
    # REFUND QUOTE
    # =========================================================================

    def compose_refund_quote(self, breakdown: RefundBreakdown) -> List[DisplayRow]:
        """Rows for the return-creation drawer before submission."""
        rows = []
        for refund in breakdown.items:
            label = f"{refund.item_id} × {refund.quantity}"
            if refund.full_return:
                label += " (full line)"
            rows.append(self._amount_row(f"item:{refund.item_id}", label, refund.amount))

        rows.append(self._amount_row("items_refund", "Items Refund", breakdown.total_items_refund))
        rows.append(self._amount_row("shipping_refund", "Shipping Refund", breakdown.shipping_refund))
        rows.append(self._total_row("total_refund", "Total Refund", breakdown.total_refund))
        return rows

    # =========================================================================
    # RETURN DETAIL
    # =========================================================================

    def compose_return_detail(
        self,
        stored: Mapping[str, Any],
        status: str = "",
        coupon_code: Optional[str] = None,
    ) -> List[DisplayRow]:
        """
        Rows for a persisted return, built only from its stored fields.

        The stored refund is what was issued; it is displayed as-is and
        never recomputed from the order.
        """
        rows = []
        if status:
            rows.append(self._note_row("status", "Status", status.replace("_", " ").title()))

        if stored.get("original_order_total"):
            rows.append(self._amount_row(
                "original_order_total", "Original Order Total", stored["original_order_total"]
            ))
        if stored.get("bundle_promo_discount"):
            rows.append(self._discount_row("pwp_discount", "PWP Discount", stored["bundle_promo_discount"]))
        if stored.get("coupon_discount"):
            label = f"Coupon ({coupon_code})" if coupon_code else "Coupon"
            rows.append(self._discount_row("coupon_discount", label, stored["coupon_discount"]))
        if stored.get("points_discount"):
            rows.append(self._discount_row("points_discount", "Points Redeemed", stored["points_discount"]))

        rows.append(self._amount_row("refund_amount", "Refund Amount", stored.get("refund_amount", 0)))
        rows.append(self._amount_row("shipping_refund", "Shipping Refund", stored.get("shipping_refund", 0)))
        rows.append(self._total_row("total_refund", "Total Refund", stored.get("total_refund", 0)))
        return rows

    def headline(self, valuation: OrderValuation, item_count: int) -> str:
        """One-line order card caption, e.g. '3 items · $ 25.70'."""
        return (
            f"{TextFormatter.pluralize(item_count, 'item')} · "
            f"{TextFormatter.currency(valuation.total, self.theme.currency_symbol)}"
        )
