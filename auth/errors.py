"""
auth/errors.py -- Exception taxonomy for authentication and authorization.

Each AuthError subclass carries the HTTP status, a machine-readable code and
a deliberately terse message. api/main.py turns any AuthError into the shared
ErrorResponse envelope, so the auth layer raises without knowing about HTTP
responses.

Messages never say which check failed beyond the code: InvalidCredentials is
the same for an unknown email, a wrong password and an orphaned admin.

Layer rule: stdlib only.
"""

from __future__ import annotations


class AuthError(Exception):
    status_code: int = 401
    code: str = "unauthorized"
    message: str = "Authentication required."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidCredentials(AuthError):
    """Login failed. Undifferentiated on purpose."""

    status_code = 400
    code = "invalid_credentials"
    message = "Invalid email or password."


class Unauthenticated(AuthError):
    """No bearer credential on the request."""

    status_code = 401
    code = "unauthenticated"
    message = "Authentication required."


class InvalidToken(AuthError):
    """Bearer credential present but malformed, unverifiable or expired."""

    status_code = 401
    code = "invalid_token"
    message = "Invalid token."


class Forbidden(AuthError):
    """Valid token, insufficient role or club scope."""

    status_code = 403
    code = "forbidden"
    message = "You do not have access to this resource."


class StoreUnavailable(Exception):
    """The credential store could not be reached.

    Fatal during startup (the bootstrap cannot guarantee a superadmin).
    """
