"""
Return Policies - Pure Business Rules.

These policies decide whether an order can be returned at all and whether
a return request is well formed. They have NO dependencies on databases or
external services; all data is passed in as parameters.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from core.domain import (
    PolicyEngine,
    PolicyDecision,
    PolicyResult,
    Validator,
    ValidationError,
    days_between,
    parse_date,
)


# =============================================================================
# CONFIGURATION (overridable from settings)
# =============================================================================

# Default return window in days, counted from delivery
DEFAULT_RETURN_WINDOW_DAYS = 30

# Statuses of an earlier return that block a new one
PENDING_RETURN_STATUSES = ["requested", "approved", "in_transit", "received", "inspecting"]

RETURN_REASONS = [
    "defective",
    "wrong_item",
    "not_as_described",
    "changed_mind",
    "other",
]

RETURN_TYPES = [
    "refund",
    "replacement",
]


# =============================================================================
# POLICIES
# =============================================================================

class ReturnWindowPolicy(PolicyEngine):
    """
    Policy for checking if an order is within its return window.

    Context required:
        - delivered_at: ISO format date string or datetime
        - return_window_days: Optional, defaults to 30
        - now: Optional, defaults to the current UTC time
    """

    def evaluate(self, context: Dict[str, Any]) -> PolicyDecision:
        delivered_at = parse_date(context.get("delivered_at"))
        if delivered_at is None:
            return PolicyDecision(
                result=PolicyResult.DENIED,
                reason="Delivery date not recorded",
            )

        window = context.get("return_window_days") or DEFAULT_RETURN_WINDOW_DAYS
        now = context.get("now") or datetime.now(timezone.utc)
        days_since_delivery = days_between(delivered_at, now)

        if days_since_delivery > window:
            return PolicyDecision(
                result=PolicyResult.DENIED,
                reason=(
                    f"Return window has expired. Orders can only be returned "
                    f"within {window} days of delivery."
                ),
                metadata={"days_since_delivery": days_since_delivery},
            )

        return PolicyDecision(
            result=PolicyResult.APPROVED,
            reason=f"{window - days_since_delivery} days remaining in return window",
            metadata={
                "days_remaining": window - days_since_delivery,
                "delivered_at": delivered_at.isoformat(),
            },
        )


class ReturnEligibilityPolicy(PolicyEngine):
    """
    Composite policy that checks all eligibility requirements.

    Context required:
        - order_status: Order status string
        - fulfillment_status: Fulfillment status string
        - existing_returns: List of stored return records for the order
        - delivered_at, return_window_days, now: see ReturnWindowPolicy
    """

    def __init__(self, return_window_days: int = DEFAULT_RETURN_WINDOW_DAYS):
        self.return_window_days = return_window_days
        self.window_policy = ReturnWindowPolicy()

    def evaluate(self, context: Dict[str, Any]) -> PolicyDecision:
        order_status = (context.get("order_status") or "").lower()
        if order_status == "canceled" or order_status == "cancelled":
            return PolicyDecision(
                result=PolicyResult.DENIED,
                reason="Order is cancelled",
            )

        fulfillment_status = (context.get("fulfillment_status") or "").lower()
        if fulfillment_status != "delivered":
            return PolicyDecision(
                result=PolicyResult.DENIED,
                reason=(
                    "Order must be delivered to request a return. "
                    f"Current status: {fulfillment_status or 'unknown'}"
                ),
                metadata={"fulfillment_status": fulfillment_status},
            )

        pending = [
            r for r in context.get("existing_returns") or []
            if (r.get("status") or "").lower() in PENDING_RETURN_STATUSES
        ]
        if pending:
            return PolicyDecision(
                result=PolicyResult.DENIED,
                reason="This order already has a pending return request",
                metadata={"pending_return_ids": [r.get("id") for r in pending]},
            )

        return self.window_policy.evaluate({
            "return_window_days": self.return_window_days,
            **context,
        })


# =============================================================================
# VALIDATORS
# =============================================================================

class ReturnRequestValidator(Validator):
    """
    Validates return request data before any refund is computed.
    """

    REQUIRED_FIELDS = [
        "order_id",
        "reason",
    ]

    def validate(self, data: Dict[str, Any]) -> List[ValidationError]:
        errors = []

        for field in self.REQUIRED_FIELDS:
            if not data.get(field):
                errors.append(ValidationError(
                    field=field,
                    message=f"{field} is required",
                    code="required",
                ))

        if not data.get("items"):
            errors.append(ValidationError(
                field="items",
                message="At least one item is required",
                code="min_length",
            ))

        reason = data.get("reason", "")
        if reason and reason not in RETURN_REASONS:
            errors.append(ValidationError(
                field="reason",
                message=f"Invalid reason. Must be one of: {', '.join(RETURN_REASONS)}",
                code="invalid_choice",
            ))

        return_type = data.get("return_type", "refund")
        if return_type not in RETURN_TYPES:
            errors.append(ValidationError(
                field="return_type",
                message=f"Invalid return type. Must be one of: {', '.join(RETURN_TYPES)}",
                code="invalid_choice",
            ))

        shipping_refund: Optional[int] = data.get("shipping_refund")
        if shipping_refund is not None and shipping_refund < 0:
            errors.append(ValidationError(
                field="shipping_refund",
                message="Shipping refund cannot be negative",
                code="min_value",
            ))

        return errors
