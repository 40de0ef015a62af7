from decimal import Decimal

import pytest
from catalogue.product.product import Product
from identity.provider.fake_adapter import FakeIdentityProvider
from identity.session import Session
from ordering.cart.items import CartLineItem
from ordering.cart.store import CartStore
from ordering.order.order import Order, OrderStatus, orders_namespace
from shared.store.memory import InMemoryDocumentStore

APP_ID = "test-app"


@pytest.fixture()
def app_id():
    return APP_ID


@pytest.fixture()
def prod1():
    return Product(id="prod1", name="Wireless Headphones", price=Decimal("99.99"), description="Over-ear")


@pytest.fixture()
def prod2():
    return Product(id="prod2", name="Smart Watch", price=Decimal("199.50"))


@pytest.fixture()
def store(loop):
    return InMemoryDocumentStore(loop=loop)


@pytest.fixture()
def provider():
    return FakeIdentityProvider(tokens={"token-001": "cust-001"})


@pytest.fixture()
def unresolved_session(provider):
    return Session(provider, token="token-001")


@pytest.fixture()
def session(unresolved_session, run):
    run(unresolved_session.bootstrap())
    return unresolved_session


@pytest.fixture()
def namespace(session, app_id):
    return orders_namespace(app_id, session.require().uid)


@pytest.fixture()
def cart():
    return CartStore()


@pytest.fixture()
def place_order(store, session, namespace, prod1, run):
    """Write an order document straight into the store and return its id."""

    def _place(status=OrderStatus.PROCESSING, line_items=None):
        order = Order.place(owner_id=session.require().uid, line_items=line_items or [_line(prod1, 1)])
        document = order.to_document()
        document["status"] = status.value
        return run(store.create(namespace, document))

    return _place


def _line(product, quantity):
    return CartLineItem.from_product(product).model_copy(update={"quantity": quantity})
