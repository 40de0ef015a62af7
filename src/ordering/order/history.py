"""Order history — the signed-in shopper's past orders."""

from datetime import UTC, datetime

import structlog
from identity.session import Session
from pydantic import ValidationError
from shared.errors import NotFound
from shared.store.port import DocumentStore

from ordering.order.order import Order, orders_namespace

logger = structlog.get_logger(__name__)

_OLDEST = datetime.min.replace(tzinfo=UTC)


def _sort_key(order):
    created_at = order.created_at
    if created_at is None:
        return _OLDEST
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=UTC)
    return created_at


class OrderHistory:
    def __init__(self, store: DocumentStore, session: Session, app_id: str):
        self._store = store
        self._session = session
        self._app_id = app_id

    def _namespace(self):
        return orders_namespace(self._app_id, self._session.require().uid)

    async def list_orders(self) -> list[Order]:
        """All orders of the current identity, newest first. Unreadable records are skipped."""
        namespace = self._namespace()
        orders = []
        for snapshot in await self._store.list_documents(namespace):
            if not snapshot.exists:
                continue
            try:
                orders.append(Order.from_snapshot(snapshot))
            except ValidationError as exc:
                logger.warning("Skipping malformed order record", order_id=snapshot.id, errors=exc.error_count())
        return sorted(orders, key=_sort_key, reverse=True)

    async def get_order(self, order_id: str) -> Order:
        snapshot = await self._store.get(self._namespace(), order_id)
        if not snapshot.exists:
            raise NotFound({"order_id": [f"Order {order_id} does not exist"]})
        return Order.from_snapshot(snapshot)
