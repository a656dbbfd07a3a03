"""Domain errors raised by the services.

Each error carries the HTTP status it maps to and a stable ``kind`` string, so the
API layer can report what went wrong without inspecting messages.
"""


class SalonError(Exception):
    status_code = 500
    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(SalonError):
    """Malformed or missing input (non-positive quantity, empty reason, ...)."""

    status_code = 400
    kind = "validation_error"


class AuthenticationError(SalonError):
    """Credentials did not match."""

    status_code = 401
    kind = "authentication_error"


class NotFoundError(SalonError):
    status_code = 404
    kind = "not_found"


class InsufficientStockError(SalonError):
    """A decrement would drive product stock below zero."""

    status_code = 409
    kind = "insufficient_stock"

    def __init__(self, product_id: str, available: int, requested: int):
        super().__init__(f"Insufficient stock. Available: {available}, requested: {requested}")
        self.product_id = product_id
        self.available = available
        self.requested = requested


class ExpiredProductError(SalonError):
    status_code = 409
    kind = "expired_product"


class ConcurrencyConflictError(SalonError):
    """The product row kept changing under us after the allowed retries."""

    status_code = 409
    kind = "concurrency_conflict"


class StorageFault(SalonError):
    status_code = 503
    kind = "storage_fault"
