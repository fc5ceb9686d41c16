"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask, HTTP, or Redis directly. They serve as stable contracts between
the token codec, the session store adapters and the auth orchestrator.

The translation to HTTP responses (RFC 7807) is handled by
``auth_service/core/errors.py``.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from adapters or domain logic.
    - The API layer translates them to problem responses.
    """

    pass


# --------------------------------------------------------------------------- #
# Authentication
# --------------------------------------------------------------------------- #


class AuthenticationError(ServiceError):
    """Raised when the presented credentials do not match an active account."""

    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Token validation
# --------------------------------------------------------------------------- #


class InvalidTokenError(ServiceError):
    """
    Raised when a token cannot be trusted.

    The codec raises one of the specific subclasses below; the orchestrator
    raises this type directly for superseded (rotated or signed-out) tokens.
    Callers that do not need the distinction catch this base class only.
    """

    def __init__(self, message: str = "Invalid token") -> None:
        super().__init__(message)


class MalformedTokenError(InvalidTokenError):
    """The token structure or its required claims could not be parsed."""

    def __init__(self, message: str = "Malformed token") -> None:
        super().__init__(message)


class SignatureMismatchError(InvalidTokenError):
    """The token signature does not match the configured secret."""

    def __init__(self, message: str = "Token signature mismatch") -> None:
        super().__init__(message)


class ExpiredTokenError(InvalidTokenError):
    """The token expiry is at or before the current time."""

    def __init__(self, message: str = "Token has expired") -> None:
        super().__init__(message)


# --------------------------------------------------------------------------- #
# Infrastructure
# --------------------------------------------------------------------------- #


class StoreUnavailableError(ServiceError):
    """
    Raised when the session store cannot be reached or times out.

    :param operation: Store operation that failed (e.g. ``"get"``).
    :type operation: str
    """

    def __init__(self, operation: str, message: str | None = None) -> None:
        self.operation = operation
        super().__init__(message or f"Session store unavailable during '{operation}'")
