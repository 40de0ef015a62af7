"""Storefront composition root.

Builds every collaborator once and hands it to whatever needs it: nothing in
the ordering context reaches for a global store or identity. The UI layer
holds a single ``Storefront`` and calls into it.

Usage:
    python src/app.py                       # place a demo order and follow it to delivery
    python src/app.py --interval 0.5        # faster simulated fulfillment
"""

import argparse
import asyncio

import structlog
from catalogue.product.catalog import get_product, list_products
from fulfillment.progression.simulated import SimulatedFulfillment
from identity.provider.fake_adapter import FakeIdentityProvider
from identity.session import Session
from ordering.cart.actions import AddItem, RemoveItem
from ordering.cart.store import CartStore
from ordering.order.history import OrderHistory
from ordering.order.submission import OrderSubmission
from ordering.order.tracker import OrderTracker
from shared.config import ProgressionMode, Settings
from shared.errors import CHECKOUT_ERRORS
from shared.logging import add_context, configure_logging
from shared.store import create_store

logger = structlog.get_logger(__name__)


class Storefront:
    def __init__(self, settings: Settings, store, identity_provider, loop=None):
        self.settings = settings
        self.store = store
        self.session = Session(identity_provider, token=settings.auth_token)
        self.cart = CartStore()
        self.submission = OrderSubmission(store, self.session, self.cart, settings.app_id)
        self.history = OrderHistory(store, self.session, settings.app_id)
        self._loop = loop

        if settings.order_progression is ProgressionMode.SIMULATED:
            self.progression = SimulatedFulfillment(store)
        else:
            self.progression = None

    async def start(self):
        """Resolve the session identity. Submission and tracking wait for this."""
        identity = await self.session.bootstrap()
        add_context(uid=identity.uid)
        logger.info("Storefront session ready", uid=identity.uid, local=identity.is_local)
        return identity

    def products(self):
        return list_products()

    def add_to_cart(self, product_id: str):
        return self.cart.dispatch(AddItem(product=get_product(product_id)))

    def remove_from_cart(self, product_id: str):
        return self.cart.dispatch(RemoveItem(product_id=product_id))

    async def checkout(self):
        return await self.submission.submit()

    def new_tracker(self) -> OrderTracker:
        """A tracker for one order view. The caller stops it when the view goes away."""
        return OrderTracker(
            self.store,
            self.session,
            self.settings.app_id,
            progression=self.progression,
            advance_interval=self.settings.advance_interval,
            loop=self._loop,
        )


def create_storefront(settings: Settings | None = None, store=None, identity_provider=None, loop=None) -> Storefront:
    settings = settings or Settings.from_env()
    if store is None:
        store = create_store(settings.store_adapter, loop=loop)
    return Storefront(
        settings,
        store,
        identity_provider if identity_provider is not None else FakeIdentityProvider(),
        loop=loop,
    )


async def run_demo(storefront: Storefront, product_ids) -> None:
    identity = await storefront.start()
    for product_id in product_ids:
        storefront.add_to_cart(product_id)
    print(f"Signed in as {identity.uid}; cart total {storefront.cart.total_display}")

    try:
        order = await storefront.checkout()
    except CHECKOUT_ERRORS as exc:
        print(f"Checkout failed: {exc.messages}")
        return
    print(f"Placed order {order.id} ({order.status.value})")

    delivered = asyncio.Event()
    tracker = storefront.new_tracker()

    def on_change(state):
        if state.status is not None:
            print(f"  {state.order_id}: {state.status.value}")
        if state.is_terminal or (state.status is not None and state.status.is_terminal):
            delivered.set()

    tracker.subscribe(on_change)
    tracker.track(order.id)
    try:
        await delivered.wait()
    finally:
        tracker.stop()


def main():
    parser = argparse.ArgumentParser(description="Storefront checkout and order tracking demo")
    parser.add_argument("--interval", type=float, help="Seconds between simulated status advances")
    parser.add_argument("products", nargs="*", default=["prod1", "prod1", "prod3"], help="Product ids to buy")
    args = parser.parse_args()

    settings = Settings.from_env()
    if args.interval is not None:
        settings = settings.model_copy(update={"advance_interval": args.interval})

    configure_logging()
    asyncio.run(run_demo(create_storefront(settings), args.products))


if __name__ == "__main__":
    main()
