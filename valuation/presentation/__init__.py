"""Order Valuation Presentation Layer."""

from .composer import OrderSummaryComposer

__all__ = ["OrderSummaryComposer"]
