"""Typed errors raised by the catalog, pricing and account services.

Every error carries a ``kind`` that the HTTP layer maps to a status code
and a human readable ``message``. Services raise these and never retry.
"""


class MarketplaceError(Exception):
    """Base class for marketplace errors."""

    kind = "error"
    status_code = 500

    def __init__(self, message: str = "An application error occurred") -> None:
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind, "message": self.message}


class NotFoundError(MarketplaceError):
    """A referenced entity does not exist."""

    kind = "not_found"
    status_code = 404


class ValidationError(MarketplaceError):
    """Quantity, stock, price-bound or input violation."""

    kind = "validation"
    status_code = 400


class ConflictError(MarketplaceError):
    """Uniqueness violation such as a duplicate SKU or email."""

    kind = "conflict"
    status_code = 409


class AuthenticationError(MarketplaceError):
    kind = "unauthenticated"
    status_code = 401


class PermissionDeniedError(MarketplaceError):
    kind = "forbidden"
    status_code = 403
