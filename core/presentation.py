"""
Presentation Layer Base Classes.

The presentation layer turns domain results into display rows for the
back-office screens (order card, order detail, return drawer, receipts).

Key principles:
- Rows are stateless representations
- No business logic in composers; amounts are formatted, never recomputed
- Consistent formatting across surfaces
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional
from enum import Enum


class RowKind(Enum):
    """Visual role of a display row."""
    AMOUNT = "amount"
    DISCOUNT = "discount"
    TOTAL = "total"
    NOTE = "note"


@dataclass
class DisplayTheme:
    """
    Theme configuration for display rows.

    Provides consistent labelling across all composers.
    """
    currency_symbol: str = "$"
    free_label: str = "Free"


# Default theme instance
DEFAULT_THEME = DisplayTheme()


@dataclass
class DisplayRow:
    """One labelled line of a summary, with its raw and formatted amount."""
    key: str
    label: str
    amount: Optional[int]
    display: str
    kind: RowKind = RowKind.AMOUNT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "label": self.label,
            "amount": self.amount,
            "display": self.display,
            "kind": self.kind.value,
        }


class SummaryComposer(ABC):
    """
    Abstract base class for summary composers.

    A SummaryComposer transforms domain results into display rows.
    Each surface has its own composer that knows how to present its
    specific data types.
    """

    def __init__(self, theme: Optional[DisplayTheme] = None):
        """
        Initialize the composer with a theme.

        Args:
            theme: Optional custom theme (uses DEFAULT_THEME if not provided)
        """
        self.theme = theme or DEFAULT_THEME

    def _amount_row(self, key: str, label: str, amount: int) -> DisplayRow:
        return DisplayRow(
            key=key,
            label=label,
            amount=amount,
            display=TextFormatter.currency(amount, self.theme.currency_symbol),
        )

    def _discount_row(self, key: str, label: str, amount: int) -> DisplayRow:
        """Create a discount row; the amount is shown negated."""
        return DisplayRow(
            key=key,
            label=label,
            amount=amount,
            display=f"-{TextFormatter.currency(amount, self.theme.currency_symbol)}",
            kind=RowKind.DISCOUNT,
        )

    def _total_row(self, key: str, label: str, amount: int) -> DisplayRow:
        row = self._amount_row(key, label, amount)
        row.kind = RowKind.TOTAL
        return row

    def _note_row(self, key: str, label: str, text: str) -> DisplayRow:
        return DisplayRow(key=key, label=label, amount=None, display=text, kind=RowKind.NOTE)

    @abstractmethod
    def get_composers(self) -> Dict[str, Callable]:
        """
        Return a dictionary of compose methods keyed by surface name.

        Returns:
            Dict mapping surface names to compose methods
        """
        pass


class TextFormatter:
    """
    Utility class for formatting text in summaries.

    Provides consistent formatting for common data types.
    """

    @staticmethod
    def currency(amount: int, currency: str = "$") -> str:
        """Format an amount in minor units as major units with two decimals."""
        sign = "-" if amount < 0 else ""
        major, minor = divmod(abs(int(amount)), 100)
        return f"{sign}{currency} {major:,}.{minor:02d}"

    @staticmethod
    def pluralize(count: int, singular: str, plural: Optional[str] = None) -> str:
        """Pluralize a word based on count."""
        if count == 1:
            return f"{count} {singular}"
        return f"{count} {plural or singular + 's'}"


def format_currency(amount: int, symbol: str = "$") -> str:
    """Shortcut for TextFormatter.currency."""
    return TextFormatter.currency(amount, symbol)
