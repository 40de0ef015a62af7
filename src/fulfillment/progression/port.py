"""Progression port — who moves an order to its next status.

The order tracker only reads; whatever advances status is plugged in here.
A real deployment leaves this to an external fulfillment service and wires
no progression at all. Without one, ``SimulatedFulfillment`` stands in.
"""

from abc import ABC, abstractmethod


class ProgressionPort(ABC):
    """Abstract interface for order status progression."""

    @abstractmethod
    async def advance(self, namespace: str, order) -> None:
        """Move ``order`` one step along the status sequence.

        Does nothing for a delivered order.

        Raises:
            WriteFailed: the status write was rejected.
        """
        ...
