"""Storefront error taxonomy, built on protean's exceptions.

Every error is raised with a ``messages`` dict keyed by the offending field
or concern, each value a list of human-readable messages:

    EmptyCart({"cart": ["Cannot check out an empty cart"]})

None of these are fatal to the process: ``NotReady`` means "wait and retry",
``EmptyCart`` is user-correctable, and the remaining ones end a single
submission or tracking session.
"""

from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError


class NotReady(InvalidOperationError):
    """Identity (or the store behind it) has not finished initializing."""


class EmptyCart(ValidationError):
    """Checkout was attempted with nothing in the cart."""


class WriteFailed(InvalidOperationError):
    """The store rejected an order creation or status write."""


class NotFound(ObjectNotFoundError):
    """The requested order id does not resolve to a record."""


class SubscriptionFailed(InvalidOperationError):
    """The store reported a transport error on an order subscription."""


# Errors a caller of checkout can handle; everything else propagates
CHECKOUT_ERRORS = (NotReady, EmptyCart, WriteFailed)
