"""Product — immutable catalog entry.

Products are loaded once at startup and never mutated. Prices are kept as
``Decimal`` so cart and order totals add up to the cent.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class Product(BaseModel):
    model_config = {"frozen": True}

    id: str = Field(min_length=1)
    name: str
    price: Decimal = Field(ge=0, decimal_places=2)
    description: str = ""
    image: str | None = None
