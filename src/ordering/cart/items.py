"""Cart line items and derived cart amounts.

A line item is the product as it looked when first added, plus a quantity.
Totals are always computed from the line items on demand, never stored.
"""

from decimal import ROUND_HALF_UP, Decimal

from catalogue.product.product import Product
from pydantic import Field

CENT = Decimal("0.01")


class CartLineItem(Product):
    quantity: int = Field(default=1, ge=1)

    @classmethod
    def from_product(cls, product: Product) -> "CartLineItem":
        return cls(**product.model_dump(exclude={"quantity"}), quantity=1)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


def cart_total(items) -> Decimal:
    """Sum of price x quantity over ``items``, rounded half-up to the cent."""
    total = sum((item.price * item.quantity for item in items), Decimal("0"))
    return total.quantize(CENT, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Render an amount with exactly two decimals, e.g. ``"199.98"``."""
    return f"{Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP):.2f}"
