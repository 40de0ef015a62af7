"""Document store port — abstract interface for the remote order store.

The ordering context programs against this port; adapters are swapped via
configuration. Documents live in namespaces (collection paths) and are plain
dicts. Reads and writes are awaitable; subscriptions are push-based and
return a callable that cancels them.
"""

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


class _ServerTimestamp:
    """Placeholder the store replaces with its own clock when writing."""

    def __repr__(self):
        return "SERVER_TIMESTAMP"


SERVER_TIMESTAMP = _ServerTimestamp()


class StoreError(Exception):
    """Adapter-level failure: store unreachable, write rejected, stream broken."""


@dataclass(frozen=True)
class DocumentSnapshot:
    """Point-in-time value of one document. ``data`` is None when it does not exist."""

    id: str
    data: dict[str, Any] | None

    @property
    def exists(self) -> bool:
        return self.data is not None


SnapshotCallback = Callable[[DocumentSnapshot], None]
ErrorCallback = Callable[[Exception], None]
Unsubscribe = Callable[[], None]


class DocumentStore(ABC):
    """Abstract interface for document store adapters."""

    @abstractmethod
    async def create(self, namespace: str, record: dict[str, Any]) -> str:
        """Persist a new document and return its store-assigned id.

        The caller does not retry; a raised ``StoreError`` means nothing was written.
        """
        ...

    @abstractmethod
    async def get(self, namespace: str, document_id: str) -> DocumentSnapshot:
        """Read one document. A missing document yields a snapshot with ``data=None``."""
        ...

    @abstractmethod
    async def list_documents(self, namespace: str) -> list[DocumentSnapshot]:
        """Read every document in a namespace."""
        ...

    @abstractmethod
    async def update(self, namespace: str, document_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document. Raises ``StoreError`` if it is missing."""
        ...

    @abstractmethod
    def subscribe(
        self,
        namespace: str,
        document_id: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> Unsubscribe:
        """Start pushing snapshots of one document.

        ``on_snapshot`` may fire many times, starting with the current state.
        ``on_error`` fires at most once and ends the stream. After the returned
        callable has been invoked, no callback fires again.
        """
        ...
