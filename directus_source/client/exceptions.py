"""Custom exceptions for Directus source operations.

Every message carries the ``directus-source:`` tag so failures can be
filtered out of the host build log.
"""

from directus_source import LOG_TAG


class DirectusSourceError(Exception):
    """Base class for all errors raised by this package."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(f"{LOG_TAG}: {self.message}")


class ConfigError(DirectusSourceError):
    """Raised when plugin options are missing or malformed.

    Always raised before any network activity takes place.
    """


class AuthError(DirectusSourceError):
    """Raised when the credential exchange with Directus fails."""


class TransportError(DirectusSourceError):
    """Raised when a request keeps failing after the whole retry budget.

    The last transport error is available as ``__cause__``.
    """


class CacheMissError(DirectusSourceError):
    """Raised when an image field is resolved for a file that was never cached."""

    def __init__(self, file_id: str):
        self.file_id = file_id
        super().__init__(f"Cached image not found for id: {file_id}")


class NotReadyError(DirectusSourceError):
    def __init__(self, message: str = "Directus session is not established yet"):
        super().__init__(message)
