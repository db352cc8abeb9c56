"""
Refund Apportioner.

Works out how much to refund for a selection of an order's lines, using the
same per-unit price resolution as the Price Reconstructor so a refund never
drifts from what the order detail screen says was charged.
"""

import logging
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from core.domain import ValidationError

from ..errors import InvalidReturnRequest
from .models import (
    ItemRefund,
    Order,
    OrderValuation,
    RefundBreakdown,
    ReturnableLine,
    ReturnRequest,
)
from .pricing import compute_order_valuation, effective_unit_price

logger = logging.getLogger(__name__)

# Return statuses that no longer hold units against the order
INACTIVE_RETURN_STATUSES = ("rejected", "cancelled")


# =============================================================================
# RETURNED QUANTITIES
# =============================================================================

def returned_quantities(returns: Iterable[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Count units already held by earlier returns, per order line.

    Args:
        returns: Stored return records, each with a status and an items list
            of {item_id, quantity}

    Returns:
        Mapping of item id to units returned so far
    """
    counts: Counter = Counter()
    for record in returns:
        if (record.get("status") or "").lower() in INACTIVE_RETURN_STATUSES:
            continue
        for entry in record.get("items") or []:
            item_id = entry.get("item_id")
            if not item_id:
                continue
            try:
                counts[item_id] += int(entry.get("quantity") or 0)
            except (TypeError, ValueError):
                logger.debug(f"Ignoring non-numeric returned quantity on {item_id}")
    return dict(counts)


# =============================================================================
# RETURNABLE LINE QUOTES
# =============================================================================

def apportion(total: int, weights: Sequence[int]) -> List[int]:
    """
    Split an integer total across weights with largest-remainder rounding.

    The shares always sum to exactly total (for a positive weight sum).
    Ties on the remainder go to the earlier weight.
    """
    clean = [max(0, w) for w in weights]
    weight_sum = sum(clean)
    if weight_sum == 0 or total == 0:
        return [0] * len(clean)

    shares = []
    remainders = []
    for index, weight in enumerate(clean):
        share, remainder = divmod(total * weight, weight_sum)
        shares.append(share)
        remainders.append((remainder, index))

    leftover = total - sum(shares)
    for _, index in sorted(remainders, key=lambda r: (-r[0], r[1]))[:leftover]:
        shares[index] += 1
    return shares


def quote_returnable_lines(
    order: Order,
    previously_returned: Optional[Mapping[str, int]] = None,
    valuation: Optional[OrderValuation] = None,
) -> List[ReturnableLine]:
    """
    Build per-line refund aids for the return-creation surface.

    The amount paid for goods (after item and order-level discounts) is
    spread over the lines by their effective subtotal, so refunding every
    unit of every line gives back exactly what was paid for items.

    Args:
        order: The order being returned against
        previously_returned: Units already held by earlier returns
        valuation: The order's valuation, computed here if not supplied

    Returns:
        One ReturnableLine per line that still has units to return
    """
    previously_returned = previously_returned or {}
    valuation = valuation or compute_order_valuation(order)

    weights = [effective_unit_price(item) * item.quantity for item in order.items]
    totals = apportion(valuation.paid_for_items, weights)

    quotes = []
    for item, refund_total in zip(order.items, totals):
        returned = previously_returned.get(item.id, 0)
        returnable = item.quantity - returned
        if returnable <= 0:
            continue

        per_unit = refund_total // item.quantity if item.quantity > 0 else 0
        quotes.append(ReturnableLine(
            item_id=item.id,
            title=item.title,
            variant_id=item.variant_id,
            unit_price=item.unit_price,
            purchased_quantity=item.quantity,
            returned_quantity=returned,
            returnable_quantity=returnable,
            refund_total=refund_total,
            refund_per_unit=per_unit,
            refund_remainder=refund_total - per_unit * item.quantity,
        ))
    return quotes


# =============================================================================
# REFUND COMPUTATION
# =============================================================================

def validate_return_request(request: ReturnRequest, order: Order) -> List[ValidationError]:
    """Check every selected line against the order; returns all problems found."""
    errors = []

    if request.order_id and request.order_id != order.id:
        errors.append(ValidationError(
            field="order_id",
            message=f"Return targets order {request.order_id}, not {order.id}",
            code="mismatch",
        ))

    if not request.lines:
        errors.append(ValidationError(
            field="items",
            message="At least one item is required",
            code="min_length",
        ))

    if request.shipping_refund < 0:
        errors.append(ValidationError(
            field="shipping_refund",
            message="Shipping refund cannot be negative",
            code="min_value",
        ))

    seen = set()
    for i, line in enumerate(request.lines):
        item = order.item(line.item_id)
        if item is None:
            errors.append(ValidationError(
                field=f"items[{i}].item_id",
                message=f"Item {line.item_id} is not part of order {order.id}",
                code="not_found",
            ))
            continue

        if line.item_id in seen:
            errors.append(ValidationError(
                field=f"items[{i}].item_id",
                message=f"Item {line.item_id} is selected more than once",
                code="duplicate",
            ))
            continue
        seen.add(line.item_id)

        returnable = item.quantity - request.previously_returned.get(item.id, 0)
        if line.requested_quantity <= 0:
            errors.append(ValidationError(
                field=f"items[{i}].quantity",
                message="Quantity must be at least 1",
                code="min_value",
            ))
        elif line.requested_quantity > returnable:
            errors.append(ValidationError(
                field=f"items[{i}].quantity",
                message=(
                    f"Requested {line.requested_quantity} of {item.id} "
                    f"but only {max(0, returnable)} can be returned"
                ),
                code="max_value",
            ))

    return errors


def compute_return_refund(request: ReturnRequest, order: Order) -> RefundBreakdown:
    """
    Compute the refundable amount for a return request.

    A line returned in full uses the precomputed full-return total when one
    was supplied, so the refund matches the order's own figure to the unit.
    Otherwise the per-unit refund (supplied, or the effective unit price)
    is multiplied by the requested quantity.

    Args:
        request: The selected lines and caller-decided shipping refund
        order: The order the lines belong to

    Returns:
        RefundBreakdown with per-line amounts and totals

    Raises:
        InvalidReturnRequest: If any line cannot be satisfied; nothing is
            computed in that case
    """
    errors = validate_return_request(request, order)
    if errors:
        raise InvalidReturnRequest.from_errors(errors)

    refunds = []
    for line in request.lines:
        item = order.item(line.item_id)
        unit = effective_unit_price(item)
        full_return = (
            line.requested_quantity == item.quantity
            and line.full_return_refund_total is not None
        )

        if full_return:
            amount = line.full_return_refund_total
        else:
            per_unit = line.per_unit_refund if line.per_unit_refund is not None else unit
            amount = per_unit * line.requested_quantity

        refunds.append(ItemRefund(
            item_id=item.id,
            quantity=line.requested_quantity,
            effective_unit_price=unit,
            amount=amount,
            full_return=full_return,
        ))

    total_items = sum(r.amount for r in refunds)
    logger.debug(
        f"Refund for order {order.id}: {len(refunds)} line(s), "
        f"items={total_items} shipping={request.shipping_refund}"
    )

    return RefundBreakdown(
        items=tuple(refunds),
        total_items_refund=total_items,
        shipping_refund=request.shipping_refund,
    )
