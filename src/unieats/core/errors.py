"""Failures raised by the authentication and directory services.

The HTTP layer maps these onto redirects (login flow) or JSON error bodies
(API routes). An unauthenticated request is not an error: the authorization
gate simply resolves no user.
"""


class AuthenticationError(Exception):
    """Base class for failures that abort a login attempt."""

    code = "authentication_failed"

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)
        self.message = message


class IssuerRejected(AuthenticationError):
    """The identity provider handshake failed.

    Covers an error returned by the issuer, an unknown or replayed state, a
    failed code exchange and an ID token that does not verify.
    """

    code = "issuer_rejected"


class MissingIdentifier(AuthenticationError):
    """The verified profile lacks a usable subject id or email address."""

    code = "missing_identifier"


class DirectoryUnavailable(Exception):
    """The user directory's backing store could not be reached."""

    code = "directory_unavailable"

    def __init__(self, message: str = "User directory unavailable") -> None:
        super().__init__(message)
        self.message = message
