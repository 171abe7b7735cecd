"""Disk-backed key/value cache for hosts without a cache of their own."""

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Any

import aiofiles

from directus_source import DEFAULT_DIRECTUS_CACHE, DIRECTUS_CACHE_NAME

logger = logging.getLogger(__name__)


class JsonFileCache:
    """Stores each value as JSON in a file named after the key's SHA-256.

    Values must be JSON serializable.
    """

    def __init__(self, cache_dir: Path | str | None = None):
        """Initialize the cache.

        Args:
            cache_dir: Directory for the cache files. Falls back to the
                ``DIRECTUS_CACHE`` environment variable, then to
                ``~/.cache/directus-source``.
        """
        if cache_dir is None:
            cache_dir = os.getenv(DIRECTUS_CACHE_NAME, None) or DEFAULT_DIRECTUS_CACHE
        self.cache_dir = Path(cache_dir).joinpath("kv")
        self.cache_dir.mkdir(parents=True, exist_ok=True)

    def get_cache_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir.joinpath(f"{digest}.json")

    async def get(self, key: str) -> Any | None:
        """Return the stored value, or None when missing or unreadable."""
        cache_path = self.get_cache_path(key)

        try:
            async with aiofiles.open(cache_path, "r") as f:
                return json.loads(await f.read())
        except FileNotFoundError:
            logger.debug(f"No cache entry for {key}")
            return None
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load cache entry for {key}: {e}")
            return None

    async def set(self, key: str, value: Any) -> Any:
        cache_path = self.get_cache_path(key)
        temp_path = cache_path.with_suffix(".tmp")
        async with aiofiles.open(temp_path, "w") as f:
            await f.write(json.dumps(value, indent=2))
        temp_path.replace(cache_path)
        logger.debug(f"Cache entry saved for {key}")
        return value

    def clear(self, key: str) -> None:
        self.get_cache_path(key).unlink(missing_ok=True)
        logger.debug(f"Cache entry cleared for {key}")
