"""
Core Framework for the Order Valuation service.

Layering:

1. Domain Layer - Pure business rules, no I/O
2. Presentation Layer - Display formatting of domain results

Domain code never formats and presentation code never recomputes.
"""

from .domain import DomainService, PolicyEngine, PolicyDecision, PolicyResult, Validator, ValidationError
from .presentation import TextFormatter, format_currency

__all__ = [
    # Domain
    "DomainService",
    "PolicyEngine",
    "PolicyDecision",
    "PolicyResult",
    "Validator",
    "ValidationError",
    # Presentation
    "TextFormatter",
    "format_currency",
]
