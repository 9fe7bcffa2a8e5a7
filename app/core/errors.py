"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to. The exception handlers in
app.main turn them into the standard {"success": false, "message": ...}
envelope.
"""


class CivicNetworkError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CivicNetworkError):
    """Missing/invalid field, out-of-bounds coordinate or disallowed enum value."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(CivicNetworkError):
    """The referenced report does not exist."""

    status_code = 404
    default_message = "Report not found"


class StoreError(CivicNetworkError):
    """
    Any failure from the persistence layer.
    The message is for operators; callers only ever see an opaque message.
    """

    status_code = 500
    default_message = "Document store operation failed"
