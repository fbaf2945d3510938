from __future__ import annotations

import logging
from typing import Callable

from n5011_bot.core.addresses import short_form
from n5011_bot.core.errors import StorageError
from n5011_bot.core.models import (
    Announce,
    AnnouncementOutcome,
    Suppressed,
    SuppressReason,
    UserState,
)
from n5011_bot.core.settings import GlobalSettings
from n5011_bot.storage.repo import Repository

logger = logging.getLogger(__name__)

# Every FULL_FORM_EVERY-th announcement shows the whole address list
FULL_FORM_EVERY = 12

RefreshScheduler = Callable[[int], None]


class ThrottleEngine:
    """
    Decides whether a message from a user should be answered with that
    user's directory address.

    The refresh scheduler is called with a user id and must return without
    waiting for the lookup to finish.
    """

    def __init__(
        self,
        *,
        repo: Repository,
        settings: GlobalSettings,
        schedule_refresh: RefreshScheduler,
        placeholder: str = "?",
    ) -> None:
        self._repo = repo
        self._settings = settings
        self._schedule_refresh = schedule_refresh
        self._placeholder = placeholder

    def decide(self, user_id: int, now: int) -> AnnouncementOutcome:
        try:
            return self._decide(user_id, now)
        except StorageError as e:
            logger.warning("decide: storage failure for user=%s: %s", user_id, e)
            return Suppressed(SuppressReason.STORAGE_ERROR)

    def _decide(self, user_id: int, now: int) -> AnnouncementOutcome:
        user = self._repo.get_user(user_id=user_id)
        if user is None:
            self._repo.insert_user(UserState(user_id=user_id, last_seen=now))
            logger.info("New user registered: user=%s ts=%s", user_id, now)
            return Suppressed(SuppressReason.UNKNOWN_USER_JUST_REGISTERED)

        interval = self._settings.interval()
        if now - user.last_seen <= interval:
            logger.debug("Too soon: user=%s elapsed=%s interval=%s", user_id, now - user.last_seen, interval)
            return Suppressed(SuppressReason.TOO_SOON)

        if user.addr is None:
            # last_seen stays as is so the user is announced once the address resolves
            logger.info("No address yet: user=%s, scheduling lookup", user_id)
            self._dispatch_refresh(user_id)
            return Suppressed(SuppressReason.NO_ADDRESS_YET)

        short_count = user.short_count + 1
        if short_count >= FULL_FORM_EVERY:
            short_count = 0
            address = user.addr
        else:
            address = short_form(user.addr)

        self._repo.update_announcement(user_id=user_id, last_seen=now, short_count=short_count)
        self._dispatch_refresh(user_id)

        text = f"{address or self._placeholder} {user.descr or ''}".rstrip()
        logger.info("Announce: user=%s short_count=%s", user_id, short_count)
        return Announce(text)

    def _dispatch_refresh(self, user_id: int) -> None:
        try:
            self._schedule_refresh(user_id)
        except Exception:
            logger.exception("Failed to schedule directory refresh for user=%s", user_id)
