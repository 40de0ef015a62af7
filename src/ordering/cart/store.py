"""CartStore — holds the current cart state and feeds actions through the reducer."""

from decimal import Decimal

import structlog

from ordering.cart.actions import ClearCart
from ordering.cart.items import CartLineItem, cart_total, format_amount
from ordering.cart.reducer import EMPTY_CART, reduce

logger = structlog.get_logger(__name__)


class CartStore:
    """In-memory cart for one storefront session. Not persisted."""

    def __init__(self, items: tuple[CartLineItem, ...] = EMPTY_CART):
        self._state = tuple(items)
        self._listeners = []

    @property
    def items(self) -> tuple[CartLineItem, ...]:
        return self._state

    @property
    def total_amount(self) -> Decimal:
        return cart_total(self._state)

    @property
    def total_display(self) -> str:
        return format_amount(self.total_amount)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self._state)

    @property
    def is_empty(self) -> bool:
        return not self._state

    def dispatch(self, action) -> tuple[CartLineItem, ...]:
        previous = self._state
        self._state = reduce(previous, action)
        if self._state is not previous:
            logger.debug("Cart updated", action=type(action).__name__, lines=len(self._state))
            for listener in list(self._listeners):
                listener(self._state)
        return self._state

    def clear(self) -> None:
        self.dispatch(ClearCart())

    def subscribe(self, listener):
        """Register ``listener(items)`` for state changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe
