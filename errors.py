"""
errors.py
---------
Error taxonomy of the order backend.

Repositories and services raise these when they can tell what went wrong.
The HTTP layer catches them and translates them into responses:
    NotFoundError          -> 404
    EmptyUpdateError       -> 400
    ImmutableFieldError    -> 400
    UnknownFieldError      -> 400
    MalformedRequestError  -> 400
    ConflictError          -> 409
    UnauthorizedError      -> 401
    PartialOrderError      -> caller decides how much to expose
Any other storage error is re-raised unchanged.
"""

from __future__ import annotations

from typing import Any, Optional


class OrderBackendError(Exception):
    """Base class for every error raised by the order backend."""


class NotFoundError(OrderBackendError):
    """The id has no matching row."""


class EmptyUpdateError(OrderBackendError):
    """An update was requested with no fields to set."""

    def __init__(self, message: str = "No fields to update"):
        super().__init__(message)


class ImmutableFieldError(OrderBackendError):
    """An update tried to change a field that is fixed at creation."""

    def __init__(self, field: str):
        self.field = field
        super().__init__(f"Unable to change the {field} field")


class UnknownFieldError(OrderBackendError):
    """A caller-supplied key is not a field of the entity."""

    def __init__(self, entity: str, fields: list[str]):
        self.entity = entity
        self.fields = fields
        super().__init__(f"Unknown {entity} field(s): {', '.join(fields)}")


class ConflictError(OrderBackendError):
    """The store rejected a write because of a uniqueness violation."""


class MalformedRequestError(OrderBackendError):
    """A payload has none of the accepted shapes or lacks a required part."""


class UnauthorizedError(OrderBackendError):
    """Invalid username/password."""


class PartialOrderError(OrderBackendError):
    """
    Some line items of an order could not be created.

    The order row and the line items that did succeed stay in the store.

    Attributes:
        order_id: Id of the order the items belong to.
        items: Created line items keyed by item id.
        failures: The exception raised for each failed product id.
        order: The composed order row (with `items`) when the failure
            happened inside the order-creation workflow, else None.
    """

    def __init__(
        self,
        order_id: int,
        items: dict[int, dict],
        failures: dict[Any, Exception],
        order: Optional[dict] = None,
    ):
        self.order_id = order_id
        self.items = items
        self.failures = failures
        self.order = order
        failed = ", ".join(str(product_id) for product_id in failures)
        super().__init__(
            f"Order #{order_id}: {len(failures)} line item(s) failed "
            f"(products: {failed}), {len(items)} created"
        )
