"""
Error taxonomy shared by every component.

Components catch these at their boundary and turn them into a UI state on the
page view; the HTTP layer only reads ``status_code`` back off them.
"""

from typing import Iterable, Optional


# Human-readable messages for the auth provider's named failure reasons.
AUTH_ERROR_MESSAGES = {
    "auth/user-not-found": "No account found with this email.",
    "auth/wrong-password": "Incorrect password. Please try again.",
    "auth/invalid-email": "Invalid email address format.",
    "auth/too-many-requests": "Too many failed attempts. Try again later.",
    "auth/invalid-credential": "Invalid email or password.",
}


class PortalError(Exception):
    """Base class for every failure the portal knows how to display."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    """Missing or unusable input, caught before anything touches the network."""
    status_code = 400

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])


class AuthError(PortalError):
    """A named sign-in failure reported by the auth provider."""
    status_code = 401

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code

    @classmethod
    def from_code(cls, code: str, raw_message: str = "") -> "AuthError":
        return cls(code, AUTH_ERROR_MESSAGES.get(code) or raw_message or code)


class NotFoundError(PortalError):
    status_code = 404


class ProfileMissing(NotFoundError):
    """An authenticated identity has no record in the users collection."""

    def __init__(self, uid: str):
        super().__init__("User profile not found in database. Contact admin.")
        self.uid = uid


class TransportError(PortalError):
    """Any other failure from the document store or the auth provider."""
    status_code = 502


class LookupFailed(TransportError):
    """The profile lookup itself failed (as opposed to finding nothing)."""
