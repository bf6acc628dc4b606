"""
Shared fixtures

- store / catalogue / order factories backed by the test database
- MEDIA_ROOT pointed at a temporary directory
"""

from decimal import Decimal
from itertools import count

import pytest

from buytogether.models import Order, OrderItem, Product, ProductVariation, Store

_sku_seq = count(1)


@pytest.fixture(autouse=True)
def media_root(settings, tmp_path):
    settings.MEDIA_ROOT = tmp_path / "media"
    return settings.MEDIA_ROOT


@pytest.fixture
def store(db):
    return Store.objects.create(name="Main store", default_currency="USD", is_default=True)


@pytest.fixture
def make_variation(store):
    """Create a product with one variation; returns the variation."""

    def _make(title="Product", price="10.00", currency_code="USD", **kwargs):
        product = Product.objects.create(store=store, title=title)
        return ProductVariation.objects.create(
            product=product,
            sku=kwargs.pop("sku", f"SKU-{next(_sku_seq)}"),
            price=Decimal(price),
            currency_code=currency_code,
            **kwargs,
        )

    return _make


@pytest.fixture
def make_order(store):
    """Create an order whose line items purchase the given variations, in order."""

    def _make(variations, state="completed"):
        order = Order.objects.create(store=store, state=state)
        for variation in variations:
            OrderItem.objects.create(
                order=order,
                purchased_entity=variation,
                quantity=1,
                unit_price=variation.price if variation is not None else Decimal("0"),
            )
        return order

    return _make
