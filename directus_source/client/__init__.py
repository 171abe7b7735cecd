from ._client import BearerAuth, DirectusAsyncClient
from .exceptions import (
    AuthError,
    CacheMissError,
    ConfigError,
    DirectusSourceError,
    NotReadyError,
    TransportError,
)
from .retry import fetch_with_retry
from .session import DirectusSession

__all__ = [
    "BearerAuth",
    "DirectusAsyncClient",
    "DirectusSession",
    "fetch_with_retry",
    "DirectusSourceError",
    "ConfigError",
    "AuthError",
    "TransportError",
    "CacheMissError",
    "NotReadyError",
]
