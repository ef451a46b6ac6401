"""Typed failures raised by the storefront domain.

Business rule violations subclass Protean's ValidationError so they carry the
usual ``messages`` dict and are handled like any other validation failure.
Missing aggregates surface as Protean's ObjectNotFoundError.
"""

from protean.exceptions import ValidationError


class OutOfStock(ValidationError):
    """No sellable stock exists for the requested size/color."""


class InsufficientStock(OutOfStock):
    """Stock exists, but less is available than was requested."""


class ItemNotFound(ValidationError):
    """A cart or wishlist line targeted by an update/remove does not exist."""


class InvalidOrder(ValidationError):
    """An order cannot be placed from the given cart or customer details."""


class InvalidTransition(ValidationError):
    """An order status change that the state machine does not allow."""

