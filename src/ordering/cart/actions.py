"""Cart actions — the only inputs the cart reducer understands."""

from catalogue.product.product import Product
from pydantic import BaseModel


class CartAction(BaseModel):
    model_config = {"frozen": True}


class AddItem(CartAction):
    product: Product


class RemoveItem(CartAction):
    product_id: str


class ClearCart(CartAction):
    pass
