"""
Valuation errors.

Only caller-input problems are errors here. Missing optional discount
fields are defaulted by the record mapper and never raise.
"""

from typing import Any, Dict, List, Optional

from core.domain import ValidationError


class InvalidReturnRequest(ValueError):
    """A requested line or quantity cannot be satisfied against the order."""

    def __init__(self, message: str, details: Optional[List[ValidationError]] = None):
        super().__init__(message)
        self.message = message
        self.details = list(details or [])

    @classmethod
    def from_errors(cls, errors: List[ValidationError]) -> "InvalidReturnRequest":
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        return cls(f"Invalid return request: {summary}", errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.message,
            "details": [e.to_dict() for e in self.details],
        }
