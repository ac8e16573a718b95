"""
core/errors.py -- Error taxonomy shared by the auth and tours layers.

Each ApiError subclass carries the HTTP status and machine-readable code it
maps to. Validation logic raises these before any mutation; api/main.py turns
them into the uniform error envelope:

    {"message": "<human readable>", "code": "<machine code>", "error": "<detail>"}

`error` carries optional detail (for example which fields were missing).
Server error detail is internal and only shown in debug mode.
"""

from typing import Optional


class ApiError(Exception):
    """Base class for errors that map directly onto an HTTP response."""

    status_code: int = 500
    code: str = "server_error"
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None) -> None:
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class Unauthenticated(ApiError):
    """Missing, invalid, or expired bearer token."""

    status_code = 401
    code = "unauthenticated"
    default_message = "No token, authorization denied"


class Forbidden(ApiError):
    """Admin gate refusal or resource ownership mismatch."""

    status_code = 403
    code = "forbidden"
    default_message = "Admin access required"


class NotFound(ApiError):
    status_code = 404
    code = "not_found"
    default_message = "Not found"


class InvalidId(ApiError):
    status_code = 400
    code = "invalid_id"
    default_message = "Invalid ID format"


class ReferentialMismatch(ApiError):
    """A child record does not belong to the parent named in the path."""

    status_code = 400
    code = "referential_mismatch"
    default_message = "Record does not belong to this tour"


class MissingFields(ApiError):
    status_code = 400
    code = "missing_fields"
    default_message = "Required fields are missing"


class Conflict(ApiError):
    """Duplicate username or email."""

    status_code = 409
    code = "conflict"
    default_message = "User already exists"


class InvalidCredentials(ApiError):
    # One message for unknown user and wrong password alike.
    status_code = 400
    code = "invalid_credentials"
    default_message = "Invalid credentials"


class ServerError(ApiError):
    pass
