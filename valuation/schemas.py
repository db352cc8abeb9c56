"""
Request and response models for the valuation HTTP surface.

Order and return records are accepted in the back-office shape (items with
metadata bags) and mapped to domain models by valuation.data.records.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# =============================================================================
# REQUESTS
# =============================================================================

class OrderValuationRequest(BaseModel):
    """Order record to value."""
    order: Dict[str, Any]


class ReturnableItemsRequest(BaseModel):
    """Order record plus the fulfillment facts needed for eligibility."""
    order: Dict[str, Any]
    order_status: str = ""
    fulfillment_status: str = ""
    delivered_at: Optional[str] = None
    existing_returns: List[Dict[str, Any]] = Field(default_factory=list)


class ReturnItemSelection(BaseModel):
    """One line chosen in the return drawer."""
    item_id: str
    quantity: int
    refund_total: Optional[int] = None
    refund_per_unit: Optional[int] = None
    product_name: Optional[str] = None
    variant_id: Optional[str] = None


class RefundQuoteRequest(BaseModel):
    """Selected lines of an order to preview a refund for."""
    order: Dict[str, Any]
    items: List[ReturnItemSelection]
    shipping_refund: int = 0
    existing_returns: List[Dict[str, Any]] = Field(default_factory=list)


class CreateReturnRequest(RefundQuoteRequest):
    """Return-creation payload."""
    reason: str
    return_type: str = "refund"
    reason_details: str = ""
    admin_notes: str = ""
    customer_id: str = ""


class ReturnDisplayRequest(BaseModel):
    """A stored return record to format for the return-detail screen."""
    return_record: Dict[str, Any] = Field(alias="return")

    class Config:
        populate_by_name = True


# =============================================================================
# RESPONSES
# =============================================================================

class DisplayRowModel(BaseModel):
    key: str
    label: str
    amount: Optional[int] = None
    display: str
    kind: str


class OrderValuationResponse(BaseModel):
    order_id: str
    currency: str
    valuation: Dict[str, int]
    rows: List[DisplayRowModel]
    total_display: str


class ReturnableItemsResponse(BaseModel):
    can_return: bool
    reason: str
    order_id: str
    days_remaining: Optional[int] = None
    returnable_items: List[Dict[str, Any]] = Field(default_factory=list)
    discount_info: Optional[Dict[str, Any]] = None


class RefundQuoteResponse(BaseModel):
    order_id: str
    refund: Dict[str, Any]
    rows: List[DisplayRowModel]


class ReturnDisplayResponse(BaseModel):
    return_id: Optional[str] = None
    rows: List[DisplayRowModel]
