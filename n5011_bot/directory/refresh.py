from __future__ import annotations

import logging
from typing import List, Protocol

from n5011_bot.core.addresses import normalize_directory
from n5011_bot.core.errors import FetchError, StorageError
from n5011_bot.core.models import DirectoryRecord
from n5011_bot.storage.repo import Repository

logger = logging.getLogger(__name__)


class DirectoryFetcher(Protocol):
    async def fetch(self, user_id: int) -> List[DirectoryRecord]:
        ...


class DirectoryRefresher:
    """
    Looks a user up in the directory service and stores the normalized
    address line. Failures are logged and leave the stored address as it was.
    """

    def __init__(self, *, repo: Repository, fetcher: DirectoryFetcher, strip_prefix: str) -> None:
        self._repo = repo
        self._fetcher = fetcher
        self._strip_prefix = strip_prefix

    async def refresh(self, user_id: int) -> bool:
        try:
            records = await self._fetcher.fetch(user_id)
        except FetchError as e:
            logger.warning("Directory lookup failed for user=%s: %s", user_id, e)
            return False

        addr = normalize_directory(records, strip_prefix=self._strip_prefix)
        try:
            self._repo.set_addr(user_id=user_id, addr=addr)
        except StorageError as e:
            logger.error("Cannot store address for user=%s: %s", user_id, e)
            return False

        logger.info("Address refreshed: user=%s addr=%s", user_id, addr)
        return True
