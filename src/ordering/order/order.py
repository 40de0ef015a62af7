"""Order record — what checkout persists and what the tracker observes.

State Machine (5 states, forward only):
    PROCESSING → CONFIRMED → SHIPPED → OUT_FOR_DELIVERY → DELIVERED

Line items are snapshots taken at submission time: later catalog or cart
changes never alter a historical order. The persisted document uses camelCase
keys (``ownerId``, ``totalAmount``, ``createdAt``) and decimal strings for
amounts.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from shared.store.port import SERVER_TIMESTAMP, DocumentSnapshot

from ordering.cart.items import cart_total


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PROCESSING = "Processing"
    CONFIRMED = "Confirmed"
    SHIPPED = "Shipped"
    OUT_FOR_DELIVERY = "OutForDelivery"
    DELIVERED = "Delivered"

    @property
    def rank(self) -> int:
        return _STATUS_ORDER[self]

    @property
    def is_terminal(self) -> bool:
        return self is OrderStatus.DELIVERED


# Position in the fulfillment sequence; statuses only ever move up
_STATUS_ORDER = {status: index for index, status in enumerate(OrderStatus)}
_SEQUENCE = tuple(OrderStatus)


def next_status(status: OrderStatus) -> OrderStatus | None:
    """The status immediately after ``status``, or None once delivered."""
    index = _STATUS_ORDER[status]
    if index + 1 >= len(_SEQUENCE):
        return None
    return _SEQUENCE[index + 1]


def orders_namespace(app_id: str, uid: str) -> str:
    """Collection path holding one identity's orders. Nobody else reads or lists it."""
    return f"artifacts/{app_id}/users/{uid}/orders"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
class _Document(BaseModel):
    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class OrderItem(_Document):
    """A line item as it was at checkout."""

    id: str
    name: str
    price: Decimal = Field(ge=0)
    quantity: int = Field(ge=1)

    @property
    def subtotal(self) -> Decimal:
        return self.price * self.quantity


class Order(_Document):
    id: str | None = None
    owner_id: str
    items: tuple[OrderItem, ...]
    total_amount: Decimal = Field(ge=0)
    status: OrderStatus = OrderStatus.PROCESSING
    created_at: datetime | None = None

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, owner_id: str, line_items) -> "Order":
        """Build a new, unsaved order from cart line items."""
        items = tuple(
            OrderItem(id=line.id, name=line.name, price=line.price, quantity=line.quantity) for line in line_items
        )
        return cls(
            owner_id=owner_id,
            items=items,
            total_amount=cart_total(items),
            status=OrderStatus.PROCESSING,
        )

    # -------------------------------------------------------------------
    # Persistence mapping
    # -------------------------------------------------------------------
    def to_document(self) -> dict:
        """Fields to write on creation. The store assigns ``id`` and ``createdAt``."""
        document = self.model_dump(mode="json", by_alias=True, exclude={"id", "created_at"})
        document["createdAt"] = SERVER_TIMESTAMP
        return document

    @classmethod
    def from_snapshot(cls, snapshot: DocumentSnapshot) -> "Order":
        return cls.model_validate({**snapshot.data, "id": snapshot.id})
