class BillingError(Exception):
    """Base class for errors raised by the billing domain."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(BillingError):
    status_code = 404


class BusinessError(BillingError):
    """The request is well formed but breaks a business rule."""

    status_code = 422


class PersistenceError(BillingError):
    """The document store rejected or failed a write."""

    status_code = 503
