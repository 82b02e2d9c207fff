"""Application error taxonomy.

Every error carries a human-readable message and the HTTP status the API
responds with. main.py renders all of them as {"success": false, "error": message}.
"""


class SipLocalError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class UpstreamAPIError(SipLocalError):
    """Non-success response (or no response) from the Yelp API."""

    status_code = 502

    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Yelp API error: {status} - {body}")


class StorageError(SipLocalError):
    """Failure reading or writing a record in the database."""

    status_code = 500


class ValidationError(SipLocalError):
    """User-submitted content violating length or range constraints."""

    status_code = 400


class AuthorizationError(SipLocalError):
    """Unauthenticated caller (401) or non-owner acting on a row (403)."""

    status_code = 403
