"""
Error taxonomy for SeNiko services.

Validation and authentication errors are expected and mapped to client
status codes at the request boundary. Store and configuration errors are
infrastructure failures reported to callers as opaque server errors.
"""
from typing import Optional


class SenikoError(Exception):
    """Base class for all SeNiko errors."""


class ConfigurationError(SenikoError):
    """Required configuration is missing or invalid. Fatal at startup."""


class ValidationError(SenikoError):
    """Request input failed validation for a single field."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message

    def as_detail(self) -> dict:
        return {"field": self.field, "message": self.message}


class EmailAlreadyRegistered(ValidationError):
    def __init__(self):
        super().__init__("email", "Email already registered")


class AuthenticationFailed(SenikoError):
    """Credentials do not match. Deliberately uninformative."""

    def __init__(self, message: str = "Incorrect email or password"):
        super().__init__(message)


class InvalidToken(SenikoError):
    """Bearer token is malformed, tampered with or expired."""


class StoreError(SenikoError):
    """The user store failed to serve a request."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class StoreUnavailable(StoreError):
    """The user store could not be reached."""


class StoreWriteFailed(StoreError):
    """A write to the user store failed for a reason other than connectivity."""


class DuplicateEmail(StoreWriteFailed):
    """The store rejected a record whose email is already taken."""
