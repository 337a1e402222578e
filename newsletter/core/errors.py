"""Error classes for the newsletter service.

Every error raised by a workflow carries the HTTP status it maps to. The
exception handlers registered in ``newsletter.main`` turn them into empty
responses with that status.
"""

from __future__ import annotations


class ConfigurationError(Exception):
    """Configuration could not be loaded. Raised before any request is served."""


class NewsletterError(Exception):
    """Base class for request-level errors.

    Attributes:
        message: Human-readable error message.
        status_code: HTTP status code to return.
    """

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class SubscriberValidationError(NewsletterError):
    """Subscriber name or email failed validation (400)."""

    status_code = 400


class MissingParameterError(NewsletterError):
    """A required form field or query parameter is absent (400)."""

    status_code = 400


class UnknownTokenError(NewsletterError):
    """No subscriber is associated with the confirmation token (401)."""

    status_code = 401


class StorageError(NewsletterError):
    """A database statement, commit or connection failed (500)."""

    status_code = 500


class EmailDeliveryError(NewsletterError):
    """The email API could not be reached or rejected the request (500)."""

    status_code = 500
