"""
Error taxonomy for the shortener.

Foreground operations (create, redirect, stats) raise one of these and the
API layer turns it into a JSON error payload. Background work (click
recording, geo enrichment) logs and swallows them instead.
"""


class ShortenerError(Exception):
    """Base class for all typed service errors."""

    error = "server_error"
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInputError(ShortenerError):
    """Malformed URL, disallowed alias characters, empty alias, bad window."""

    error = "invalid_input"
    status_code = 400


class ConflictError(ShortenerError):
    """Requested custom alias is already taken."""

    error = "conflict"
    status_code = 409


class ExhaustedError(ShortenerError):
    """Every generated candidate collided; the whole request may be retried."""

    error = "exhausted"
    status_code = 503


class NotFoundError(ShortenerError):
    """Short code does not resolve to a link."""

    error = "not_found"
    status_code = 404


class StorageError(ShortenerError):
    """Any other persistence failure."""

    error = "storage"
    status_code = 500


class EnrichmentFailure(ShortenerError):
    """Geo lookup timed out or failed. Never surfaced to the end user."""

    error = "enrichment"
