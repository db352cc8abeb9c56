"""Mapping of back-office order and return records onto domain models."""

from .records import (
    order_from_record,
    return_request_from_record,
    stored_refund_fields,
)

__all__ = [
    "order_from_record",
    "return_request_from_record",
    "stored_refund_fields",
]
