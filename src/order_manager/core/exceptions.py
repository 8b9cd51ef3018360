"""Domain errors raised by the order service.

Each error carries the HTTP status it maps to; the application's exception
handlers are the only place that turns them into responses.
"""

from __future__ import annotations


class OrderManagerError(Exception):
    """Base class for errors that have a client-facing meaning."""

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class BadRequestError(OrderManagerError):
    """Input failed validation: description, product ids or path id."""

    status_code = 400
    default_message = "Bad request"


class NotFoundError(OrderManagerError):
    """The requested order does not exist."""

    status_code = 404
    default_message = "Resource not found"


class ConflictError(OrderManagerError):
    """A unique constraint was violated."""

    status_code = 409
    default_message = "Resource already exists"


class InternalServerError(OrderManagerError):
    status_code = 500
    default_message = "Internal server error"
