"""Static product catalog.

The catalog is fixed: no stock tracking, no runtime edits. Lookups by id
are the only query the storefront needs.
"""

from decimal import Decimal

from shared.errors import NotFound

from catalogue.product.product import Product

_PRODUCTS = (
    Product(
        id="prod1",
        name="Wireless Headphones",
        price=Decimal("99.99"),
        description="Over-ear headphones with active noise cancellation and 30-hour battery life.",
        image="images/headphones.jpg",
    ),
    Product(
        id="prod2",
        name="Smart Watch",
        price=Decimal("199.50"),
        description="Fitness tracking, heart-rate monitoring and notifications on your wrist.",
        image="images/smartwatch.jpg",
    ),
    Product(
        id="prod3",
        name="Portable Speaker",
        price=Decimal("45.00"),
        description="Water-resistant Bluetooth speaker with 12 hours of playback.",
        image="images/speaker.jpg",
    ),
    Product(
        id="prod4",
        name="USB-C Charging Cable",
        price=Decimal("12.49"),
        description="Braided 2 m cable, 100 W power delivery.",
        image="images/cable.jpg",
    ),
)

_BY_ID = {product.id: product for product in _PRODUCTS}


def list_products() -> tuple[Product, ...]:
    """All products, in display order."""
    return _PRODUCTS


def get_product(product_id: str) -> Product:
    try:
        return _BY_ID[product_id]
    except KeyError:
        raise NotFound({"product_id": [f"Unknown product: {product_id}"]}) from None
