"""
Order Valuation Domain Layer.

Contains the pure monetary rules for orders and returns.
No database access or I/O - just business rules.
"""

from .models import (
    BulkTierPrice,
    BundlePromo,
    GlobalVariantMarkdown,
    ItemAdjustment,
    LineItem,
    NoDiscount,
    Order,
    OrderValuation,
    RefundBreakdown,
    ReturnableLine,
    ReturnLine,
    ReturnRequest,
)
from .pricing import compute_order_valuation, effective_unit_price, original_unit_price
from .refunds import compute_return_refund, quote_returnable_lines, returned_quantities
from .policies import ReturnEligibilityPolicy, ReturnRequestValidator, ReturnWindowPolicy
from .services import (
    OrderValuationService,
    RefundCalculator,
    ReturnableItemsService,
    ReturnRecord,
    ReturnRequestBuilder,
)

__all__ = [
    # Models
    "BulkTierPrice",
    "BundlePromo",
    "GlobalVariantMarkdown",
    "ItemAdjustment",
    "LineItem",
    "NoDiscount",
    "Order",
    "OrderValuation",
    "RefundBreakdown",
    "ReturnableLine",
    "ReturnLine",
    "ReturnRequest",
    # Price Reconstructor
    "compute_order_valuation",
    "effective_unit_price",
    "original_unit_price",
    # Refund Apportioner
    "compute_return_refund",
    "quote_returnable_lines",
    "returned_quantities",
    # Policies
    "ReturnEligibilityPolicy",
    "ReturnRequestValidator",
    "ReturnWindowPolicy",
    # Services
    "OrderValuationService",
    "RefundCalculator",
    "ReturnableItemsService",
    "ReturnRecord",
    "ReturnRequestBuilder",
]
