"""
Error taxonomy shared by the store, the HTTP layer and the booking client.

Every failure a caller can observe is one of these. The HTTP layer turns
them into ``{"code", "message", "details"}`` bodies with the matching
status, and ``ReservationClient`` turns those bodies back into the same
classes.
"""


class BookingError(Exception):
    status = 500
    code = "STORE_ERROR"

    def __init__(self, message: str, details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r})"


class ValidationError(BookingError):
    """A required field is missing or malformed."""

    status = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: str | None = None, details=None):
        super().__init__(message, details)
        self.field = field


class NotFoundError(BookingError):
    status = 404
    code = "NOT_FOUND"


class ConflictError(BookingError):
    """Requested tables are already held by another reservation in the slot."""

    status = 409
    code = "TABLE_CONFLICT"

    def __init__(self, message: str, tables=None):
        self.tables = sorted(tables or [])
        super().__init__(message, details=self.tables or None)


class StoreError(BookingError):
    status = 500
    code = "STORE_ERROR"
