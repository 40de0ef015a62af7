"""Cart reducer — the single state transition function for the cart.

Cart state is an immutable tuple of ``CartLineItem`` in insertion order.
``reduce`` never mutates its input, never raises, and returns the very same
tuple object when an action changes nothing, so callers can detect no-ops
with ``is``.

Invariants after any sequence of actions:
    - at most one line item per product id
    - every quantity is >= 1 (a line reaching zero is dropped)
"""

from ordering.cart.actions import AddItem, ClearCart, RemoveItem
from ordering.cart.items import CartLineItem

EMPTY_CART: tuple[CartLineItem, ...] = ()


def _index_of(state, product_id):
    return next((index for index, item in enumerate(state) if item.id == product_id), None)


def _add_item(state, product):
    index = _index_of(state, product.id)
    if index is None:
        return (*state, CartLineItem.from_product(product))

    # Display fields stay as they were at first add; only the quantity moves.
    existing = state[index]
    updated = existing.model_copy(update={"quantity": existing.quantity + 1})
    return (*state[:index], updated, *state[index + 1 :])


def _remove_item(state, product_id):
    index = _index_of(state, product_id)
    if index is None:
        return state

    existing = state[index]
    if existing.quantity > 1:
        updated = existing.model_copy(update={"quantity": existing.quantity - 1})
        return (*state[:index], updated, *state[index + 1 :])
    return (*state[:index], *state[index + 1 :])


def reduce(state: tuple[CartLineItem, ...], action) -> tuple[CartLineItem, ...]:
    """Apply one cart action. Unknown actions leave the state untouched."""
    if isinstance(action, AddItem):
        return _add_item(state, action.product)
    if isinstance(action, RemoveItem):
        return _remove_item(state, action.product_id)
    if isinstance(action, ClearCart):
        return EMPTY_CART if state else state
    return state
