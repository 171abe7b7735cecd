from pathlib import Path
from typing import Final

__version__: Final[str] = "0.1.0"

LOG_TAG: Final[str] = "directus-source"
DIRECTUS_TOKEN_NAME: Final[str] = "DIRECTUS_TOKEN"
DIRECTUS_CACHE_NAME: Final[str] = "DIRECTUS_CACHE"
DEFAULT_DIRECTUS_CACHE: Final[Path] = Path("~/.cache/directus-source").expanduser()
DEFAULT_CONCURRENCY: Final[int] = 10
DEFAULT_RETRIES: Final[int] = 5
DEFAULT_REFRESH_INTERVAL: Final[float] = 15.0

from .plugin import DirectusSourcePlugin  # noqa: E402

__all__ = [
    "DirectusSourcePlugin",
]
