"""
Domain Layer Base Classes.

The domain layer contains pure business logic with no external dependencies.
Every monetary rule in this project lives here so that the order detail,
refund quote and receipt surfaces all agree on the same numbers.

Example Usage:
    class ReturnWindowPolicy(PolicyEngine):
        def evaluate(self, context: dict) -> PolicyDecision:
            # Pure business logic here
            ...
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
from enum import Enum


class PolicyResult(Enum):
    """Result of a policy evaluation."""
    APPROVED = "approved"
    DENIED = "denied"


@dataclass
class PolicyDecision:
    """
    The outcome of a policy evaluation.

    Attributes:
        result: The policy decision result
        reason: Human-readable explanation
        metadata: Additional context for the decision
    """
    result: PolicyResult
    reason: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_approved(self) -> bool:
        return self.result == PolicyResult.APPROVED

    @property
    def is_denied(self) -> bool:
        return self.result == PolicyResult.DENIED


class PolicyEngine(ABC):
    """
    Abstract base class for policy engines.

    A PolicyEngine encapsulates a set of business rules that can be
    evaluated against a context to produce a decision.

    Example:
        class DeliveredOrderPolicy(PolicyEngine):
            def evaluate(self, context: dict) -> PolicyDecision:
                if context.get("fulfillment_status") != "delivered":
                    return PolicyDecision(
                        result=PolicyResult.DENIED,
                        reason="Order must be delivered"
                    )
                return PolicyDecision(
                    result=PolicyResult.APPROVED,
                    reason="Order is delivered"
                )
    """

    @abstractmethod
    def evaluate(self, context: Dict[str, Any]) -> PolicyDecision:
        """
        Evaluate the policy against the given context.

        Args:
            context: Dictionary containing all data needed for evaluation

        Returns:
            PolicyDecision with the result and explanation
        """
        pass


class DomainService(ABC):
    """
    Abstract base class for domain services.

    Domain services combine pricing functions and policies into one
    operation used by an outer surface.

    Key principles:
    - No I/O operations (database, network, file)
    - All dependencies passed as parameters
    - Return domain objects, not DTOs
    """

    @abstractmethod
    def execute(self, *args, **kwargs) -> Any:
        """
        Execute the domain service operation.

        Implementation should contain pure business logic only.
        """
        pass


@dataclass
class ValidationError:
    """A validation error with field and message."""
    field: str
    message: str
    code: str = "invalid"

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


class Validator(ABC):
    """
    Abstract base class for validators.

    Validators check that data meets business requirements before processing.
    """

    @abstractmethod
    def validate(self, data: Dict[str, Any]) -> List[ValidationError]:
        """
        Validate the data and return any errors.

        Args:
            data: The data to validate

        Returns:
            List of ValidationError objects (empty if valid)
        """
        pass

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Check if data is valid."""
        return len(self.validate(data)) == 0


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def days_between(date1: datetime, date2: datetime) -> int:
    """Calculate the number of whole days from date1 to date2."""
    if date1.tzinfo is None:
        date1 = date1.replace(tzinfo=timezone.utc)
    if date2.tzinfo is None:
        date2 = date2.replace(tzinfo=timezone.utc)
    return (date2 - date1).days


def parse_date(value: Any) -> Optional[datetime]:
    """Parse an ISO format date string (or pass a datetime through) safely."""
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if not value or not isinstance(value, str):
        return None
    try:
        if "Z" in value:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        parsed = datetime.fromisoformat(value)
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    except (ValueError, TypeError):
        return None
