"""Document store abstraction — pluggable backing store for orders."""

import os


def create_store(adapter: str | None = None, **kwargs):
    """Build the configured document store adapter.

    Uses the in-memory store by default. Select another adapter via the
    STORE_ADAPTER environment variable. The caller owns the returned
    instance and passes it to whatever needs it.
    """
    adapter = adapter or os.environ.get("STORE_ADAPTER", "memory")
    if adapter == "memory":
        from shared.store.memory import InMemoryDocumentStore

        return InMemoryDocumentStore(**kwargs)
    raise ValueError(f"Unknown store adapter: {adapter}")
