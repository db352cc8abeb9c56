"""Shared pytest fixtures for valuation tests."""

import pytest

from valuation.domain.models import (
    BulkTierPrice,
    BundlePromo,
    GlobalVariantMarkdown,
    LineItem,
    Order,
)


def variant_item(item_id: str = "item-1", quantity: int = 2) -> LineItem:
    """1000 per unit after a 200 storewide markdown, no explicit original price."""
    return LineItem(
        id=item_id,
        unit_price=1000,
        quantity=quantity,
        discounts=(GlobalVariantMarkdown(amount_per_unit=200),),
        title="Linen Shirt",
    )


def bundle_item(item_id: str = "item-pwp", quantity: int = 1, amount: int = 300) -> LineItem:
    return LineItem(
        id=item_id,
        unit_price=1500,
        quantity=quantity,
        discounts=(BundlePromo(amount_per_unit=amount),),
        title="Canvas Tote",
    )


def bulk_item(item_id: str = "item-bulk", quantity: int = 10) -> LineItem:
    return LineItem(
        id=item_id,
        unit_price=450,
        quantity=quantity,
        original_unit_price=500,
        discounts=(BulkTierPrice(),),
        title="Cotton Socks",
    )


@pytest.fixture
def variant_order() -> Order:
    """Two marked-down units, shipping 500, tax 70, no coupon."""
    return Order(
        id="order-1",
        items=(variant_item(),),
        shipping_method_amount=500,
        tax_amount=70,
    )


@pytest.fixture
def variant_order_record() -> dict:
    """The variant_order fixture in back-office record shape."""
    return {
        "id": "order-1",
        "currency_code": "sgd",
        "shipping_total": 500,
        "tax_total": 70,
        "discount_total": 0,
        "items": [
            {
                "id": "item-1",
                "title": "Linen Shirt",
                "variant_id": "variant-1",
                "unit_price": 1000,
                "quantity": 2,
                "metadata": {
                    "is_variant_discount": True,
                    "variant_discount_amount": 200,
                },
            },
        ],
        "metadata": {},
    }
