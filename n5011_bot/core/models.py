from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union


@dataclass(frozen=True)
class UserState:
    user_id: int
    last_seen: int
    addr: Optional[str] = None
    descr: Optional[str] = None
    short_count: int = 0


@dataclass(frozen=True)
class DirectoryRecord:
    address: str
    display_name: str
    owner_user_id: int
    telegram_name: Optional[str] = None
    telegram_login: Optional[str] = None


class SuppressReason(str, Enum):
    TOO_SOON = "too_soon"
    NO_ADDRESS_YET = "no_address_yet"
    UNKNOWN_USER_JUST_REGISTERED = "unknown_user_just_registered"
    STORAGE_ERROR = "storage_error"


@dataclass(frozen=True)
class Suppressed:
    reason: SuppressReason


@dataclass(frozen=True)
class Announce:
    text: str


AnnouncementOutcome = Union[Suppressed, Announce]
