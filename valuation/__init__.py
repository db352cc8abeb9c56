"""
Order Valuation.

One shared implementation of order monetary valuation for the back-office:

- Price Reconstructor: subtotal, stacked discounts, shipping, tax and total
- Refund Apportioner: refundable amount for a selection of an order's lines

Usage:
    from valuation import compute_order_valuation, order_from_record

    valuation = compute_order_valuation(order_from_record(record))
"""

from valuation.data import order_from_record, return_request_from_record
from valuation.domain import (
    compute_order_valuation,
    compute_return_refund,
    quote_returnable_lines,
)
from valuation.errors import InvalidReturnRequest

__all__ = [
    "compute_order_valuation",
    "compute_return_refund",
    "quote_returnable_lines",
    "order_from_record",
    "return_request_from_record",
    "InvalidReturnRequest",
]
