"""Mirror Directus file assets into the host cache.

Each Directus file id maps to the id of the node created for its download.
The mapping is kept in the host's durable cache, so a rebuild only downloads
files it has not seen before and touches the nodes of the others.
"""

import asyncio
import logging
from typing import AsyncIterator

import pydantic

from directus_source.client.exceptions import CacheMissError
from directus_source.client.session import DirectusSession
from directus_source.host.protocols import (
    KeyValueCache,
    Node,
    NodeStore,
    RemoteFileNodeFactory,
)
from directus_source.types.cache_entry import CacheEntry
from directus_source.types.file_record import FileRecord
from directus_source.types.sync_report import SyncReport
from directus_source.utils.split_filename import split_filename

logger = logging.getLogger(__name__)


class AssetSyncCache:
    def __init__(
        self,
        session: DirectusSession,
        *,
        cache: KeyValueCache,
        nodes: NodeStore,
        files: RemoteFileNodeFactory,
    ):
        self.session = session
        self.cache = cache
        self.nodes = nodes
        self.files = files

    async def cache_entry(self, file_id: str) -> CacheEntry | None:
        """Load the entry for ``file_id``; entries of an unknown shape are misses."""
        cached = await self.cache.get(file_id)
        if not cached:
            return None
        try:
            return CacheEntry.model_validate(cached)
        except pydantic.ValidationError as e:
            logger.warning(f"Ignoring unreadable cache entry for {file_id}: {e}")
            return None

    async def cached_node(self, file_id: str) -> Node | None:
        if entry := await self.cache_entry(file_id):
            return self.nodes.get_node(entry.node_id)
        return None

    async def sync(self, batches: AsyncIterator[list[FileRecord]]) -> SyncReport:
        """Sync every batch, one batch at a time, files of a batch concurrently.

        A failing download propagates once the siblings still in flight have
        been cancelled and have finished unwinding. No further batch is read.
        """
        report = SyncReport()

        async for files in batches:
            tasks = [asyncio.create_task(self.sync_file(file, report)) for file in files]
            try:
                await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise

        logger.info(
            f"Synced {report.total} files: {len(report.downloaded)} downloaded, "
            + f"{len(report.touched)} unchanged"
        )
        return report

    async def sync_file(self, file: FileRecord, report: SyncReport) -> None:
        if node := await self.cached_node(file.id):
            logger.debug(f"File {file.id} found in cache")
            self.nodes.touch_node(node)
            report.touched.append(file.id)
            return

        name, ext = split_filename(file.filename_download)
        file_node = await self.files.create_remote_file_node(
            url=self.session.endpoints.asset_url(file.id),
            parent_node_id=file.id,
            headers=await self.session.auth_headers(),
            ext=ext,
            name=name,
            fetch=self.session.fetch,
        )
        await self.cache.set(file.id, CacheEntry(node_id=file_node.id).model_dump())
        report.downloaded.append(file.id)

    async def resolve(self, file_id: str) -> Node | None:
        """Return the node cached for ``file_id``.

        Raises:
            CacheMissError: No cache entry exists for the file.
        """
        if not (entry := await self.cache_entry(file_id)):
            raise CacheMissError(file_id)
        return self.nodes.get_node(entry.node_id)
