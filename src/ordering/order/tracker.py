"""Order tracker — follows one order record and drives its status forward.

State Machine (per tracking session):
    IDLE → LOADING                 track(order_id)
    LOADING → ACTIVE               first snapshot, record exists
    LOADING → NOT_FOUND            first snapshot, record absent        (terminal)
    LOADING/ACTIVE → FAILED        subscription error or bad record     (terminal)
    ACTIVE → ACTIVE                every later snapshot replaces the order
    ACTIVE → NOT_FOUND             record disappeared                   (terminal)
    any → IDLE                     stop(), or track() of another order

Progression: each ACTIVE snapshot whose status is not DELIVERED cancels the
armed advance timer and arms a new one ``advance_interval`` seconds later.
When it fires, the configured progression writes the next status; the write
comes back through the subscription as a new snapshot, which arms the next
timer. DELIVERED arms nothing, which is what ends the loop. A snapshot at or
above the status an in-flight advance started from cancels that advance, so
a stale write never moves the record backward. Without a progression the
tracker only reads.

The tracker owns its subscription, its timer and any in-flight advance.
Every callback carries the generation it was created for, so anything queued
before ``stop()`` or a switch to another order is dropped on arrival.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from functools import partial

import structlog
from fulfillment.progression.port import ProgressionPort
from identity.session import Session
from pydantic import ValidationError
from shared.errors import NotFound, SubscriptionFailed, WriteFailed
from shared.store.port import DocumentStore

from ordering.order.order import Order, OrderStatus, orders_namespace

logger = structlog.get_logger(__name__)

DEFAULT_ADVANCE_INTERVAL = 3.0


class TrackingPhase(Enum):
    IDLE = "Idle"
    LOADING = "Loading"
    ACTIVE = "Active"
    NOT_FOUND = "Not_Found"
    FAILED = "Failed"


_TERMINAL_PHASES = {TrackingPhase.NOT_FOUND, TrackingPhase.FAILED}


@dataclass(frozen=True)
class TrackingState:
    phase: TrackingPhase
    order_id: str | None = None
    order: Order | None = None
    error: Exception | None = None

    @property
    def status(self) -> OrderStatus | None:
        return self.order.status if self.order is not None else None

    @property
    def is_terminal(self) -> bool:
        return self.phase in _TERMINAL_PHASES


IDLE = TrackingState(TrackingPhase.IDLE)


class OrderTracker:
    def __init__(
        self,
        store: DocumentStore,
        session: Session,
        app_id: str,
        progression: ProgressionPort | None = None,
        advance_interval: float = DEFAULT_ADVANCE_INTERVAL,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        if advance_interval <= 0:
            raise ValueError("advance_interval must be positive")

        self._store = store
        self._session = session
        self._app_id = app_id
        self._progression = progression
        self._advance_interval = advance_interval
        self._loop = loop

        self._state = IDLE
        self._generation = 0
        self._namespace: str | None = None
        self._unsubscribe = None
        self._timer: asyncio.TimerHandle | None = None
        self._armed_for: OrderStatus | None = None
        self._advance_task: asyncio.Task | None = None
        self._advancing_from: OrderStatus | None = None
        self._listeners = []

        # Most recent failed advance write; the displayed state is unaffected
        self.last_error: WriteFailed | None = None

    # -------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------
    @property
    def state(self) -> TrackingState:
        return self._state

    @property
    def status(self) -> OrderStatus | None:
        return self._state.status

    @property
    def has_pending_advance(self) -> bool:
        return self._timer is not None

    @property
    def pending_advance_from(self) -> OrderStatus | None:
        """Status the armed timer will advance from, if one is armed."""
        return self._armed_for if self._timer is not None else None

    def subscribe(self, listener):
        """Register ``listener(state)`` for tracker changes. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def track(self, order_id: str) -> None:
        """Start following ``order_id``, ending any session already in progress."""
        identity = self._session.require()
        self.stop()

        generation = self._generation
        self._namespace = orders_namespace(self._app_id, identity.uid)
        self.last_error = None
        self._set_state(TrackingState(TrackingPhase.LOADING, order_id=order_id))
        logger.debug("Tracking order", order_id=order_id)

        unsubscribe = self._store.subscribe(
            self._namespace,
            order_id,
            partial(self._on_snapshot, generation),
            partial(self._on_error, generation),
        )
        if generation != self._generation:
            # The session ended while subscribing (a synchronous first snapshot)
            unsubscribe()
        else:
            self._unsubscribe = unsubscribe

    def stop(self) -> None:
        """End the tracking session. Safe to call at any time, any number of times."""
        self._generation += 1
        self._release()
        if self._state.phase is not TrackingPhase.IDLE:
            logger.debug("Stopped tracking order", order_id=self._state.order_id)
            self._set_state(IDLE)

    # -------------------------------------------------------------------
    # Subscription callbacks
    # -------------------------------------------------------------------
    def _on_snapshot(self, generation, snapshot):
        if generation != self._generation:
            return

        order_id = self._state.order_id
        if not snapshot.exists:
            logger.info("Tracked order not found", order_id=order_id)
            self._finish(TrackingPhase.NOT_FOUND, NotFound({"order_id": [f"Order {order_id} does not exist"]}))
            return

        try:
            order = Order.from_snapshot(snapshot)
        except ValidationError as exc:
            logger.error("Tracked order record is malformed", order_id=order_id, errors=exc.error_count())
            self._finish(TrackingPhase.FAILED, SubscriptionFailed({"order": ["Order record is malformed"]}))
            return

        current = self._state.order
        if current is not None and order.status.rank < current.status.rank:
            logger.warning(
                "Ignoring out-of-order status snapshot",
                order_id=order_id,
                displayed=current.status.value,
                received=order.status.value,
            )
            return

        self._cancel_stale_advance(order.status)
        self._state = TrackingState(TrackingPhase.ACTIVE, order_id=order_id, order=order)
        self._arm(generation, order)
        self._notify()

    def _on_error(self, generation, exc):
        if generation != self._generation:
            return

        logger.error("Order subscription failed", order_id=self._state.order_id, reason=str(exc))
        self._finish(TrackingPhase.FAILED, SubscriptionFailed({"subscription": [str(exc) or type(exc).__name__]}))

    # -------------------------------------------------------------------
    # Progression
    # -------------------------------------------------------------------
    def _arm(self, generation, order):
        # At most one pending advance per order: always cancel before re-arming
        self._cancel_timer()
        if self._progression is None or order.status.is_terminal:
            return

        self._armed_for = order.status
        self._timer = self._get_loop().call_later(
            self._advance_interval, self._on_advance_due, generation, self._namespace, order
        )

    def _on_advance_due(self, generation, namespace, order):
        self._timer = None
        self._armed_for = None
        if generation != self._generation:
            return
        self._advancing_from = order.status
        self._advance_task = self._get_loop().create_task(self._advance(generation, namespace, order))

    async def _advance(self, generation, namespace, order):
        try:
            await self._progression.advance(namespace, order)
        except WriteFailed as exc:
            if generation == self._generation:
                logger.warning("Status advance was not written", order_id=order.id, status=order.status.value)
                self._record_failure(exc)
        except Exception as exc:
            if generation == self._generation:
                logger.exception("Status advance failed", order_id=order.id, status=order.status.value)
                self._record_failure(WriteFailed({"status": [f"Could not advance order {order.id}: {exc!r}"]}))
        finally:
            if self._advance_task is asyncio.current_task():
                self._advance_task = None
                self._advancing_from = None

    def _record_failure(self, error):
        self.last_error = error
        self._notify()

    def _cancel_stale_advance(self, status):
        if self._advance_task is not None and status.rank >= self._advancing_from.rank:
            logger.debug("Cancelling superseded status advance", from_status=self._advancing_from.value)
            self._cancel_advance()

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _finish(self, phase, error):
        self._generation += 1
        self._release()
        self._state = TrackingState(phase, order_id=self._state.order_id, order=self._state.order, error=error)
        self._notify()

    def _release(self):
        self._cancel_timer()
        self._cancel_advance()
        if self._unsubscribe is not None:
            unsubscribe, self._unsubscribe = self._unsubscribe, None
            unsubscribe()

    def _cancel_advance(self):
        if self._advance_task is not None:
            task, self._advance_task = self._advance_task, None
            task.cancel()
        self._advancing_from = None

    def _cancel_timer(self):
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None
        self._armed_for = None

    def _set_state(self, state):
        self._state = state
        self._notify()

    def _notify(self):
        for listener in list(self._listeners):
            listener(self._state)

    def _get_loop(self):
        return self._loop or asyncio.get_running_loop()
