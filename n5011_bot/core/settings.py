from __future__ import annotations

import logging
from typing import FrozenSet, Iterable

from n5011_bot.core.errors import ValidationError
from n5011_bot.storage.repo import Repository

logger = logging.getLogger(__name__)


class GlobalSettings:
    """
    Process-wide settings: the fixed admin list and the stored announcement interval.

    Built once at startup and passed to the components that need it.
    """

    def __init__(self, *, repo: Repository, admin_ids: Iterable[int], default_interval: int) -> None:
        self._repo = repo
        self._admin_ids: FrozenSet[int] = frozenset(admin_ids)
        self._default_interval = default_interval

    @property
    def admin_ids(self) -> FrozenSet[int]:
        return self._admin_ids

    def is_admin(self, user_id: int) -> bool:
        return user_id in self._admin_ids

    def interval(self) -> int:
        """Announcement interval in seconds. Raises StorageError."""
        value = self._repo.get_interval()
        if value is None:
            logger.info("Announcement interval unset, storing default %s sec", self._default_interval)
            self._repo.set_interval(seconds=self._default_interval)
            return self._default_interval
        return value

    def set_interval(self, seconds: int) -> None:
        if seconds < 0:
            raise ValidationError(f"interval must not be negative: {seconds}")
        self._repo.set_interval(seconds=seconds)
        logger.info("Announcement interval set to %s sec", seconds)
