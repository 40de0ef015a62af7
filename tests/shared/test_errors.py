"""Tests for the storefront error types."""

import pytest
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from shared.errors import CHECKOUT_ERRORS, EmptyCart, NotFound, NotReady, SubscriptionFailed, WriteFailed


@pytest.mark.parametrize(
    "error_class,base",
    [
        (NotReady, InvalidOperationError),
        (EmptyCart, ValidationError),
        (WriteFailed, InvalidOperationError),
        (NotFound, ObjectNotFoundError),
        (SubscriptionFailed, InvalidOperationError),
    ],
)
def test_errors_extend_protean_exceptions(error_class, base):
    assert issubclass(error_class, base)


def test_messages_are_kept_per_field():
    exc = EmptyCart({"cart": ["Cannot check out an empty cart"]})
    assert exc.messages == {"cart": ["Cannot check out an empty cart"]}


def test_not_found_is_not_a_checkout_error():
    assert NotFound not in CHECKOUT_ERRORS
    assert set(CHECKOUT_ERRORS) == {NotReady, EmptyCart, WriteFailed}
