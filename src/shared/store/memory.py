"""In-memory document store — push-capable store for development and testing.

Documents are kept per namespace as deep copies, so callers can never mutate
stored state through a dict they passed in or received. Snapshots are
delivered on the event loop with ``call_soon``: the write returns first and
subscribers see the result on the next loop iteration, the way a remote
store's listener would. Failure behavior is configurable for integration
testing.
"""

import asyncio
import copy
from datetime import UTC, datetime
from uuid import uuid4

import structlog

from shared.store.port import SERVER_TIMESTAMP, DocumentSnapshot, DocumentStore, StoreError

logger = structlog.get_logger(__name__)


class _Subscription:
    def __init__(self, namespace, document_id, on_snapshot, on_error):
        self.namespace = namespace
        self.document_id = document_id
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active = True

    def deliver(self, snapshot):
        # Re-checked at delivery time: a cancelled subscription may still have
        # callbacks queued on the loop.
        if self.active:
            self.on_snapshot(snapshot)

    def fail(self, exc):
        if self.active:
            self.active = False
            self.on_error(exc)


class InMemoryDocumentStore(DocumentStore):
    """Document store kept in process memory. Succeeds by default."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None, clock=None):
        self._loop = loop
        self._clock = clock or (lambda: datetime.now(UTC))
        self._collections: dict[str, dict[str, dict]] = {}
        self._subscriptions: dict[tuple[str, str], list[_Subscription]] = {}

        self.should_succeed = True
        self.failure_reason = "Store unavailable"
        # (operation, namespace, document_id, fields) for every successful write
        self.writes: list[tuple[str, str, str, dict]] = []

    def configure(self, should_succeed: bool = True, failure_reason: str = "Store unavailable"):
        """Configure the fake store's write behavior for testing."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    # -------------------------------------------------------------------
    # Reads and writes
    # -------------------------------------------------------------------
    async def create(self, namespace, record):
        await asyncio.sleep(0)
        self._check_writable()

        document_id = uuid4().hex[:20]
        data = self._resolve_server_values(record)
        self._collections.setdefault(namespace, {})[document_id] = data
        self.writes.append(("create", namespace, document_id, copy.deepcopy(data)))

        logger.debug("Document created", namespace=namespace, document_id=document_id)
        self._publish(namespace, document_id)
        return document_id

    async def get(self, namespace, document_id):
        await asyncio.sleep(0)
        return self._snapshot(namespace, document_id)

    async def list_documents(self, namespace):
        await asyncio.sleep(0)
        return [self._snapshot(namespace, document_id) for document_id in self._collections.get(namespace, {})]

    async def update(self, namespace, document_id, fields):
        await asyncio.sleep(0)
        self._check_writable()

        documents = self._collections.get(namespace, {})
        if document_id not in documents:
            raise StoreError(f"No document {document_id} in {namespace}")

        resolved = self._resolve_server_values(fields)
        documents[document_id].update(resolved)
        self.writes.append(("update", namespace, document_id, copy.deepcopy(resolved)))

        logger.debug("Document updated", namespace=namespace, document_id=document_id, fields=list(fields))
        self._publish(namespace, document_id)

    async def delete(self, namespace, document_id):
        """Remove a document. Not part of the port; orders are never deleted in normal operation."""
        await asyncio.sleep(0)
        self._collections.get(namespace, {}).pop(document_id, None)
        self._publish(namespace, document_id)

    # -------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------
    def subscribe(self, namespace, document_id, on_snapshot, on_error):
        subscription = _Subscription(namespace, document_id, on_snapshot, on_error)
        key = (namespace, document_id)
        self._subscriptions.setdefault(key, []).append(subscription)
        self._get_loop().call_soon(subscription.deliver, self._snapshot(namespace, document_id))

        def unsubscribe():
            subscription.active = False
            subscribers = self._subscriptions.get(key, [])
            if subscription in subscribers:
                subscribers.remove(subscription)

        return unsubscribe

    def fail_subscriptions(self, failure_reason: str = "Stream interrupted", namespace=None, document_id=None):
        """Push an error to matching live subscriptions, ending their streams."""
        for key, subscribers in list(self._subscriptions.items()):
            if namespace is not None and key[0] != namespace:
                continue
            if document_id is not None and key[1] != document_id:
                continue
            for subscription in subscribers:
                self._get_loop().call_soon(subscription.fail, StoreError(failure_reason))
            del self._subscriptions[key]

    def subscriber_count(self, namespace, document_id) -> int:
        return len(self._subscriptions.get((namespace, document_id), []))

    # -------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------
    def _get_loop(self):
        return self._loop or asyncio.get_running_loop()

    def _check_writable(self):
        if not self.should_succeed:
            raise StoreError(self.failure_reason)

    def _resolve_server_values(self, fields):
        now = self._clock()
        return {key: (now if value is SERVER_TIMESTAMP else copy.deepcopy(value)) for key, value in fields.items()}

    def _snapshot(self, namespace, document_id):
        data = self._collections.get(namespace, {}).get(document_id)
        return DocumentSnapshot(id=document_id, data=copy.deepcopy(data) if data is not None else None)

    def _publish(self, namespace, document_id):
        subscribers = self._subscriptions.get((namespace, document_id))
        if not subscribers:
            return
        snapshot = self._snapshot(namespace, document_id)
        loop = self._get_loop()
        for subscription in list(subscribers):
            loop.call_soon(subscription.deliver, snapshot)
