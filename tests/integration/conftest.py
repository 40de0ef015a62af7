import pytest
from identity.provider.fake_adapter import FakeIdentityProvider
from shared.config import ProgressionMode, Settings
from shared.store.memory import InMemoryDocumentStore

from app import create_storefront


@pytest.fixture()
def store(loop):
    return InMemoryDocumentStore(loop=loop)


@pytest.fixture()
def make_storefront(store, loop):
    """Build a storefront on the test loop, fast-forwarding simulated fulfillment."""

    def _make(order_progression=ProgressionMode.SIMULATED, auth_token=None):
        settings = Settings(
            env="test",
            app_id="test-app",
            order_progression=order_progression,
            advance_interval=0.01,
            auth_token=auth_token,
        )
        provider = FakeIdentityProvider(tokens={"token-001": "cust-001"})
        return create_storefront(settings, store=store, identity_provider=provider, loop=loop)

    return _make
