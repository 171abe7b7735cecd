"""Page-by-page enumeration of the remote file library."""

import logging

from directus_source.client.exceptions import NotReadyError
from directus_source.client.session import DirectusSession
from directus_source.types.file_record import FileRecord

logger = logging.getLogger(__name__)


class FilePaginator:
    """Cursor over ``/files``, one batch of ``page_size`` records at a time.

    Records are sorted by id, so pages never overlap even when files are added
    while the cursor runs. A short page is the last one. The cursor cannot be
    restarted; create a new one for another pass.

    ``async for`` yields non-empty batches only, while :meth:`next_batch`
    also returns the empty page that marks exhaustion.
    """

    def __init__(self, session: DirectusSession | None, *, page_size: int):
        if session is None or not session.established:
            raise NotReadyError()
        self.session = session
        self.page_size = page_size
        self.page = 1
        self.exhausted = False

    async def next_batch(self) -> list[FileRecord] | None:
        """Fetch the next page, or return ``None`` once the last page was read."""
        if self.exhausted:
            return None

        files = await self.session.read_files(page=self.page, limit=self.page_size)
        logger.debug(f"Read {len(files)} file records from page {self.page}")

        if len(files) < self.page_size:
            self.exhausted = True
        else:
            self.page += 1
        return files

    def __aiter__(self) -> "FilePaginator":
        return self

    async def __anext__(self) -> list[FileRecord]:
        files = await self.next_batch()
        if not files:
            raise StopAsyncIteration
        return files
