class BookingServiceError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(BookingServiceError):
    """Missing or malformed input. Nothing is written."""

    status_code = 400


class NotFoundError(BookingServiceError):
    """Ground or booking does not exist."""

    status_code = 404


class ConflictError(BookingServiceError):
    """Requested slot is already held on this ground or a related one."""

    status_code = 400


class SecurityError(BookingServiceError):
    """Gateway signature did not match. The booking has been marked failed."""

    status_code = 400


class UpstreamError(BookingServiceError):
    """Gateway call failed or reported an unsuccessful payment."""

    status_code = 500


class IllegalStateError(BookingServiceError):
    """Operation not allowed from the booking's current payment status."""

    status_code = 400


class InternalError(BookingServiceError):
    status_code = 500
