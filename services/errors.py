class PortalError(Exception):
    """Base for errors rendered as ``{"error": message}`` with ``status_code``."""

    status_code = 500
    message = "Internal error"

    def __init__(self, message=None, **details):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.details = details

    def to_dict(self):
        body = {"error": self.message}
        body.update(self.details)
        return body


class Unauthorized(PortalError):
    status_code = 401
    message = "UnAuthorized Access"


class Forbidden(PortalError):
    status_code = 403
    message = "Forbidden Access"


class NotFound(PortalError):
    status_code = 404
    message = "Not found"


class ValidationError(PortalError):
    status_code = 400
    message = "Invalid request"


class AlreadyPaid(PortalError):
    """Booking was settled by a different transaction; the new one is not credited."""

    status_code = 409
    message = "Booking already paid"


class StoreUnavailable(PortalError):
    """Transient store failure. Safe to retry."""

    status_code = 503
    message = "Store unavailable, try again"


class AvailabilityUnavailable(StoreUnavailable):
    message = "Availability is temporarily unavailable"


class ReconciliationInconsistent(PortalError):
    """Payment was logged but the booking could not be marked paid."""

    status_code = 500
    message = "Payment recorded but booking update failed"


class ChargeFailed(PortalError):
    status_code = 502
    message = "Payment provider error"
