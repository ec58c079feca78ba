# app/core/exceptions.py
"""
Domain errors raised by the workflow services.

Each error carries a stable `kind` so API clients can tell them apart
without parsing messages. The HTTP mapping lives in app.main.
"""


class MarketplaceError(Exception):
    kind = "error"
    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class NotFoundError(MarketplaceError):
    kind = "not_found"
    status_code = 404


class ForbiddenError(MarketplaceError):
    kind = "forbidden"
    status_code = 403


class ConflictError(MarketplaceError):
    kind = "conflict"
    status_code = 409


class InvalidStateError(MarketplaceError):
    kind = "invalid_state"
    status_code = 400


class ValidationError(MarketplaceError):
    kind = "validation_error"
    status_code = 422
