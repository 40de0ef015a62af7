"""Order submission — turns the cart into a persisted order at checkout.

Checkout is a simulated confirmation: no payment is authorized. Preconditions
are checked locally before the store is contacted, so a rejected submission
never leaves a partial write behind:

    - the session identity must be resolved (``NotReady``)
    - the cart must not be empty (``EmptyCart``)

Only one submission runs at a time: a second ``submit()`` while one is in
flight joins it and gets the same order, so a double-click creates one record.

On success the submitted lines are taken out of the cart; anything added
while the write was in flight stays. On a store failure the cart is left
exactly as it was so the shopper can retry; the store call itself is not
retried.
"""

import asyncio

import structlog
from identity.session import Session
from shared.errors import EmptyCart, WriteFailed
from shared.store.port import DocumentStore, StoreError

from ordering.cart.actions import RemoveItem
from ordering.cart.store import CartStore
from ordering.order.order import Order, orders_namespace

logger = structlog.get_logger(__name__)


class OrderSubmission:
    def __init__(self, store: DocumentStore, session: Session, cart: CartStore, app_id: str):
        self._store = store
        self._session = session
        self._cart = cart
        self._app_id = app_id
        self._in_flight: asyncio.Future | None = None

    @property
    def in_flight(self) -> bool:
        return self._in_flight is not None

    async def submit(self) -> Order:
        if self._in_flight is None:
            self._in_flight = asyncio.ensure_future(self._submit())
            self._in_flight.add_done_callback(self._on_submission_done)
        else:
            logger.debug("Joining submission already in flight")

        # Shielded: a cancelled caller must not cancel the write for the others
        return await asyncio.shield(self._in_flight)

    def _on_submission_done(self, future):
        if self._in_flight is future:
            self._in_flight = None

    async def _submit(self) -> Order:
        identity = self._session.require()
        if self._cart.is_empty:
            raise EmptyCart({"cart": ["Cannot check out an empty cart"]})

        submitted = self._cart.items
        order = Order.place(owner_id=identity.uid, line_items=submitted)
        namespace = orders_namespace(self._app_id, identity.uid)

        try:
            order_id = await self._store.create(namespace, order.to_document())
        except StoreError as exc:
            logger.warning("Order submission failed", owner_id=identity.uid, reason=str(exc))
            raise WriteFailed({"order": [f"Could not place order: {exc}"]}) from exc

        self._take_out_of_cart(submitted)
        logger.info(
            "Order submitted",
            order_id=order_id,
            owner_id=identity.uid,
            items=len(order.items),
            total_amount=str(order.total_amount),
        )
        return order.model_copy(update={"id": order_id})

    def _take_out_of_cart(self, submitted):
        if self._cart.items is submitted:
            self._cart.clear()
            return

        # The cart changed during the write: remove only the units that were ordered
        for line in submitted:
            for _ in range(line.quantity):
                self._cart.dispatch(RemoveItem(product_id=line.id))
