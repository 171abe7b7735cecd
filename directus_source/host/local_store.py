"""Local node registry and asset downloader.

A minimal stand-in for a build system's node graph: nodes live in memory and
are persisted to ``nodes.json`` on :meth:`LocalAssetStore.save`, downloaded
assets are written below the cache directory.
"""

import hashlib
import json
import logging
import os
import uuid
from pathlib import Path
from typing import Any, Awaitable, Callable

import aiofiles
import httpx
from tqdm.asyncio import tqdm as async_tqdm

from directus_source import DEFAULT_DIRECTUS_CACHE, DIRECTUS_CACHE_NAME
from directus_source.host.protocols import Node
from directus_source.types.remote_file_node import RemoteFileNode

logger = logging.getLogger(__name__)


class LocalAssetStore:
    def __init__(self, cache_dir: Path | str | None = None, *, progress: bool = False):
        if cache_dir is None:
            cache_dir = os.getenv(DIRECTUS_CACHE_NAME, None) or DEFAULT_DIRECTUS_CACHE
        self.cache_dir = Path(cache_dir)
        self.assets_dir = self.cache_dir.joinpath("assets")
        self.assets_dir.mkdir(parents=True, exist_ok=True)
        self.progress = progress

        self.nodes: dict[str, Node] = {}
        self.touched: set[str] = set()
        self.created: set[str] = set()
        self.load()

    @property
    def manifest_path(self) -> Path:
        return self.cache_dir.joinpath("nodes.json")

    def load(self) -> None:
        if not self.manifest_path.exists():
            return
        try:
            self.nodes = json.loads(self.manifest_path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Failed to load node manifest, starting empty: {e}")
            self.nodes = {}

    def save(self) -> None:
        self.manifest_path.write_text(json.dumps(self.nodes, indent=2))
        logger.debug(f"Saved {len(self.nodes)} nodes to {self.manifest_path}")

    def get_node(self, node_id: str) -> Node | None:
        return self.nodes.get(node_id)

    def touch_node(self, node: Node) -> None:
        self.touched.add(node["id"])

    def create_node(self, node: Node) -> None:
        self.nodes[node["id"]] = node
        self.created.add(node["id"])

    def stale_nodes(self) -> list[Node]:
        """Nodes neither created nor touched since this store was opened."""
        live = self.touched | self.created
        return [node for node_id, node in self.nodes.items() if node_id not in live]

    async def create_remote_file_node(
        self,
        *,
        url: str,
        parent_node_id: str,
        headers: dict[str, str],
        ext: str,
        name: str,
        fetch: Callable[..., Awaitable[httpx.Response]],
    ) -> RemoteFileNode:
        """Download ``url`` and register it as a ``File`` node.

        ``fetch`` is called with ``stream=True``; the body is written chunk by
        chunk to a temporary path and moved into place only once complete.
        """
        node_id = str(uuid.uuid5(uuid.NAMESPACE_URL, url))
        url_digest = hashlib.sha256(url.encode("utf-8")).hexdigest()
        download_filepath = self.assets_dir.joinpath(url_digest, f"{name}{ext}")
        download_filepath.parent.mkdir(parents=True, exist_ok=True)
        temp_filepath = download_filepath.with_name(download_filepath.name + ".tmp")

        response = await fetch(url, headers=headers, stream=True)
        try:
            response.raise_for_status()
            total_size = int(response.headers.get("content-length", 0))

            async with aiofiles.open(temp_filepath, "wb") as f:
                with async_tqdm(
                    desc=f"Downloading {name}{ext}",
                    total=total_size,
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    disable=not self.progress,
                ) as pbar:
                    async for chunk in response.aiter_bytes(chunk_size=8192):
                        await f.write(chunk)
                        pbar.update(len(chunk))

            # Atomic move: only replace final file after successful download
            temp_filepath.replace(download_filepath)

        except Exception:
            # Clean up temporary file on failure
            temp_filepath.unlink(missing_ok=True)
            raise

        finally:
            await response.aclose()

        file_node = RemoteFileNode(
            id=node_id,
            url=url,
            path=download_filepath,
            name=name,
            ext=ext,
            parent_node_id=parent_node_id,
        )
        self.create_node(
            {
                "id": node_id,
                "parent": parent_node_id,
                "url": url,
                "absolutePath": str(download_filepath),
                "name": name,
                "ext": ext,
                "internal": {"type": "File"},
            }
        )
        logger.info(f"Downloaded {url} to {download_filepath}")
        return file_node
