"""Simulated fulfillment — advances orders by writing the next status back.

Stands in for a fulfillment pipeline during development and demos. Each call
writes exactly one forward step; the tracker decides when to call it.
"""

import structlog
from ordering.order.order import next_status
from shared.errors import WriteFailed
from shared.store.port import DocumentStore, StoreError

from fulfillment.progression.port import ProgressionPort

logger = structlog.get_logger(__name__)


class SimulatedFulfillment(ProgressionPort):
    def __init__(self, store: DocumentStore):
        self._store = store

    async def advance(self, namespace, order):
        target = next_status(order.status)
        if target is None:
            return

        try:
            await self._store.update(namespace, order.id, {"status": target.value})
        except StoreError as exc:
            logger.warning(
                "Simulated status advance failed",
                order_id=order.id,
                from_status=order.status.value,
                to_status=target.value,
                reason=str(exc),
            )
            raise WriteFailed({"status": [f"Could not advance order {order.id}: {exc}"]}) from exc

        logger.info(
            "Order status advanced",
            order_id=order.id,
            from_status=order.status.value,
            to_status=target.value,
        )
