from __future__ import annotations

from typing import Optional, Protocol

from n5011_bot.core.models import UserState


class Repository(Protocol):
    """
    Persistent per-user throttle state and the global settings row.

    Implementations raise StorageError for any driver failure.
    """

    # --- users ---
    def get_user(self, *, user_id: int) -> Optional[UserState]:
        ...

    def insert_user(self, state: UserState) -> None:
        ...

    def update_announcement(self, *, user_id: int, last_seen: int, short_count: int) -> None:
        ...

    def set_addr(self, *, user_id: int, addr: str) -> None:
        ...

    def set_descr(self, *, user_id: int, descr: str, now: int) -> None:
        """Store directory text; creates the user row (last_seen=now) if missing."""
        ...

    # --- settings ---
    def get_interval(self) -> Optional[int]:
        ...

    def set_interval(self, *, seconds: int) -> None:
        ...
