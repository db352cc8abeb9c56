"""
Domain Services - Business Operations.

These services wire the Price Reconstructor, the Refund Apportioner and the
return policies into the operations the outer surfaces need. They use no
I/O and work with the immutable domain models.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional
import uuid

from core.domain import DomainService

from ..errors import InvalidReturnRequest
from .models import (
    Order,
    OrderValuation,
    RefundBreakdown,
    ReturnableLine,
    ReturnLine,
    ReturnRequest,
)
from .policies import (
    DEFAULT_RETURN_WINDOW_DAYS,
    ReturnEligibilityPolicy,
    ReturnRequestValidator,
)
from .pricing import compute_order_valuation
from .refunds import compute_return_refund, quote_returnable_lines


@dataclass
class ReturnRecord:
    """A return request ready to be persisted by the caller."""
    id: str
    order_id: str
    customer_id: str
    return_type: str
    reason: str
    reason_details: str
    items: List[Dict[str, Any]]
    refund_amount: int
    shipping_refund: int
    total_refund: int
    original_order_total: int
    coupon_code: Optional[str]
    coupon_discount: int
    points_redeemed: int
    points_discount: int
    bundle_promo_discount: int
    status: str = "requested"
    admin_notes: str = ""
    requested_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "customer_id": self.customer_id,
            "return_type": self.return_type,
            "reason": self.reason,
            "reason_details": self.reason_details,
            "items": self.items,
            "refund_amount": self.refund_amount,
            "shipping_refund": self.shipping_refund,
            "total_refund": self.total_refund,
            "original_order_total": self.original_order_total,
            "coupon_code": self.coupon_code,
            "coupon_discount": self.coupon_discount,
            "points_redeemed": self.points_redeemed,
            "points_discount": self.points_discount,
            "pwp_discount": self.bundle_promo_discount,
            "status": self.status,
            "admin_notes": self.admin_notes,
            "requested_at": self.requested_at.isoformat(),
        }


@dataclass
class ReturnableItems:
    """Eligibility decision plus the lines that can still be returned."""
    can_return: bool
    reason: str
    lines: List[ReturnableLine] = field(default_factory=list)
    valuation: Optional[OrderValuation] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class OrderValuationService(DomainService):
    """Values an order for the listing, detail and receipt surfaces."""

    def execute(self, order: Order) -> OrderValuation:
        return compute_order_valuation(order)


class ReturnableItemsService(DomainService):
    """
    Decides whether an order can be returned and, if so, quotes each line.

    Eligibility follows ReturnEligibilityPolicy; the quotes come from
    quote_returnable_lines so that full returns refund exactly what was paid.
    """

    def __init__(self, return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS):
        self.policy = ReturnEligibilityPolicy(return_window_days=return_window_days)

    def execute(
        self,
        order: Order,
        order_status: str = "",
        fulfillment_status: str = "",
        delivered_at: Any = None,
        existing_returns: Optional[List[Mapping[str, Any]]] = None,
        previously_returned: Optional[Mapping[str, int]] = None,
        now: Optional[datetime] = None,
    ) -> ReturnableItems:
        decision = self.policy.evaluate({
            "order_status": order_status,
            "fulfillment_status": fulfillment_status,
            "delivered_at": delivered_at,
            "existing_returns": existing_returns or [],
            "now": now,
        })
        if decision.is_denied:
            return ReturnableItems(
                can_return=False,
                reason=decision.reason,
                metadata=decision.metadata,
            )

        valuation = compute_order_valuation(order)
        return ReturnableItems(
            can_return=True,
            reason=decision.reason,
            lines=quote_returnable_lines(order, previously_returned, valuation),
            valuation=valuation,
            metadata=decision.metadata,
        )


class RefundCalculator(DomainService):
    """
    Calculates the refund for a return request.

    Lines that arrive without precision aids get them from the order's own
    returnable-line quotes, so the drawer preview and the stored return agree.
    A partial return that takes the last units of a line at the quoted
    per-unit refund also gets the line's rounding remainder, so a line
    returned in several steps refunds its full quoted total.
    """

    def execute(self, request: ReturnRequest, order: Order) -> RefundBreakdown:
        quotes = {
            q.item_id: q
            for q in quote_returnable_lines(order, request.previously_returned)
        }

        lines = []
        for line in request.lines:
            quote = quotes.get(line.item_id)
            if quote is not None:
                line = replace(
                    line,
                    full_return_refund_total=(
                        line.full_return_refund_total
                        if line.full_return_refund_total is not None
                        else quote.refund_total
                    ),
                    per_unit_refund=(
                        line.per_unit_refund
                        if line.per_unit_refund is not None
                        else quote.refund_per_unit
                    ),
                )
            lines.append(line)

        breakdown = compute_return_refund(replace(request, lines=tuple(lines)), order)

        refunds = []
        for refund, line in zip(breakdown.items, lines):
            quote = quotes.get(refund.item_id)
            if (
                quote is not None
                and quote.refund_remainder
                and not refund.full_return
                and refund.quantity == quote.returnable_quantity
                and line.per_unit_refund == quote.refund_per_unit
            ):
                refund = replace(refund, amount=refund.amount + quote.refund_remainder)
            refunds.append(refund)

        return RefundBreakdown(
            items=tuple(refunds),
            total_items_refund=sum(r.amount for r in refunds),
            shipping_refund=breakdown.shipping_refund,
        )


class ReturnRequestBuilder(DomainService):
    """
    Builds a validated return record.

    This service:
    1. Validates all input data
    2. Calculates refund amounts
    3. Snapshots the order's discount information onto the record
    """

    def __init__(self):
        self.validator = ReturnRequestValidator()
        self.refund_calculator = RefundCalculator()

    def execute(
        self,
        order: Order,
        request: ReturnRequest,
        reason: str,
        return_type: str = "refund",
        customer_id: str = "",
        reason_details: str = "",
        admin_notes: str = "",
        item_details: Optional[Mapping[str, Mapping[str, Any]]] = None,
    ) -> ReturnRecord:
        """
        Build a return record.

        Args:
            order: The order being returned against
            request: Selected lines and shipping refund
            reason: Return reason code
            return_type: "refund" or "replacement"
            customer_id: Customer owning the order
            reason_details: Free-text details about the reason
            admin_notes: Operator notes
            item_details: Optional extra fields per item id to store with the items

        Returns:
            A complete ReturnRecord

        Raises:
            InvalidReturnRequest: If validation fails
        """
        errors = self.validator.validate({
            "order_id": request.order_id,
            "items": request.lines,
            "reason": reason,
            "return_type": return_type,
            "shipping_refund": request.shipping_refund,
        })
        if errors:
            raise InvalidReturnRequest.from_errors(errors)

        breakdown = self.refund_calculator.execute(request, order)
        valuation = compute_order_valuation(order)
        item_details = item_details or {}

        items = []
        for refund in breakdown.items:
            item = order.item(refund.item_id)
            items.append({
                "item_id": item.id,
                "variant_id": item.variant_id,
                "product_name": item.title,
                "quantity": refund.quantity,
                "unit_price": item.unit_price,
                "refund_amount": refund.amount,
                **item_details.get(item.id, {}),
            })

        return ReturnRecord(
            id=f"RET-{uuid.uuid4().hex[:8].upper()}",
            order_id=order.id,
            customer_id=customer_id,
            return_type=return_type,
            reason=reason,
            reason_details=reason_details,
            items=items,
            refund_amount=breakdown.total_items_refund,
            shipping_refund=breakdown.shipping_refund,
            total_refund=breakdown.total_refund,
            original_order_total=valuation.original_subtotal,
            coupon_code=order.coupon_code,
            coupon_discount=valuation.coupon_discount,
            points_redeemed=order.points_redeemed,
            points_discount=valuation.points_discount,
            bundle_promo_discount=valuation.bundle_promo_discount,
            admin_notes=admin_notes,
        )
