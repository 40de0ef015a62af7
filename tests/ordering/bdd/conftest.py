"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from identity.provider.fake_adapter import FakeIdentityProvider
from pytest_bdd import given, parsers, then
from shared.config import Settings
from shared.store.memory import InMemoryDocumentStore

from app import create_storefront

# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def settings():
    return Settings(env="test", app_id="test-app", advance_interval=0.01)


@pytest.fixture()
def store(loop):
    return InMemoryDocumentStore(loop=loop)


@pytest.fixture()
def storefront(settings, store, loop):
    return create_storefront(settings, store=store, identity_provider=FakeIdentityProvider(), loop=loop)


@pytest.fixture()
def outcome():
    """Container for results and captured errors of When steps."""
    return {"order": None, "exc": None, "tracker": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("an empty cart")
def empty_cart(storefront):
    assert storefront.cart.is_empty


@given("a signed-in shopper")
def signed_in_shopper(storefront, run):
    run(storefront.start())


@given(parsers.cfparse('the cart holds {quantity:d} of "{product_id}"'))
def cart_holds(storefront, quantity, product_id):
    for _ in range(quantity):
        storefront.add_to_cart(product_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the cart has {count:d} line"))
def cart_has_n_lines_singular(storefront, count):
    assert len(storefront.cart.items) == count


@then(parsers.cfparse("the cart has {count:d} lines"))
def cart_has_n_lines(storefront, count):
    assert len(storefront.cart.items) == count


@then(parsers.cfparse('line "{product_id}" has quantity {quantity:d}'))
def line_has_quantity(storefront, product_id, quantity):
    lines = {item.id: item for item in storefront.cart.items}
    assert lines[product_id].quantity == quantity


@then(parsers.cfparse('the cart total is "{total}"'))
def cart_total_is(storefront, total):
    assert storefront.cart.total_display == total


@then("the cart is empty")
def cart_is_empty(storefront):
    assert storefront.cart.is_empty
