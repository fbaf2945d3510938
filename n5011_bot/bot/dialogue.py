from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Set, Tuple, Union

from n5011_bot.bot.messages import (
    KEEP_SENTINEL,
    LABEL_CANCEL,
    LABEL_CHANGE_DIRECTORY,
    LABEL_SET_INTERVAL,
    MSG_CURRENT_DESCR,
    MSG_CURRENT_INTERVAL,
    MSG_DESCR_EMPTY,
    MSG_DESCR_SAVED,
    MSG_INTERVAL_INVALID,
    MSG_INTERVAL_SAVED,
    MSG_MENU,
    MSG_NO_RIGHTS,
    MSG_NOTHING_TO_DO,
    MSG_RESTARTED,
    MSG_STORAGE_UNAVAILABLE,
    MSG_UNCHANGED,
    SupportedLocale,
    get_message,
)
from n5011_bot.core.errors import StorageError, ValidationError
from n5011_bot.core.settings import GlobalSettings
from n5011_bot.storage.repo import Repository

logger = logging.getLogger(__name__)


# --- dialogue states ---
@dataclass(frozen=True)
class Start:
    restarted: bool = True


@dataclass(frozen=True)
class AwaitingCommand:
    user_id: int
    is_admin: bool


@dataclass(frozen=True)
class AwaitingOrigin:
    prior: AwaitingCommand


@dataclass(frozen=True)
class AwaitingInterval:
    prior: AwaitingCommand


DialogueState = Union[Start, AwaitingCommand, AwaitingOrigin, AwaitingInterval]


@dataclass(frozen=True)
class Reply:
    text: str
    # Reply keyboard labels; None removes the keyboard
    menu: Optional[Tuple[str, ...]] = None


Transition = Tuple[DialogueState, Reply]

_NUMBER_RE = re.compile(r"^\d+$", re.ASCII)


def parse_interval(text: str) -> int:
    raw = text.strip()
    if not _NUMBER_RE.match(raw):
        raise ValidationError(f"not a non-negative integer: {text!r}")
    return int(raw)


class ConfigDialogue:
    """
    Private-chat dialogue for editing the user's directory text and, for
    admins, the announcement interval.

    One state per chat, kept in memory only. A chat seen for the first time
    since the process started gets a "restarted" notice with its menu.
    """

    def __init__(
        self,
        *,
        repo: Repository,
        settings: GlobalSettings,
        locale: SupportedLocale = "en",
        interval_unit_sec: int = 1,
        interval_unit_name: str = "sec",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._repo = repo
        self._settings = settings
        self._locale = locale
        self._unit_sec = interval_unit_sec
        self._unit_name = interval_unit_name
        self._clock = clock
        # Only conversations in progress; a finished one falls back to Start
        self._states: Dict[int, DialogueState] = {}
        self._seen: Set[int] = set()
        self._handlers: Dict[type, Callable[..., Transition]] = {
            Start: self._on_start,
            AwaitingCommand: self._on_command,
            AwaitingOrigin: self._on_origin,
            AwaitingInterval: self._on_interval,
        }

    def state(self, chat_id: int) -> DialogueState:
        state = self._states.get(chat_id)
        if state is None:
            return Start(restarted=chat_id not in self._seen)
        return state

    def handle(self, *, chat_id: int, user_id: int, text: str) -> Reply:
        state = self.state(chat_id)
        handler = self._handlers[type(state)]
        try:
            new_state, reply = handler(state, user_id, text)
        except StorageError as e:
            logger.warning("Dialogue step failed: chat=%s state=%s: %s", chat_id, type(state).__name__, e)
            new_state, reply = Start(restarted=False), Reply(self._msg(MSG_STORAGE_UNAVAILABLE))

        logger.debug("Dialogue chat=%s: %s -> %s", chat_id, type(state).__name__, type(new_state).__name__)
        self._seen.add(chat_id)
        if isinstance(new_state, Start):
            self._states.pop(chat_id, None)
        else:
            self._states[chat_id] = new_state
        return reply

    # --- helpers ---
    def _msg(self, msg_type: str, **kwargs) -> str:
        return get_message(msg_type, self._locale, **kwargs)

    def _menu(self, is_admin: bool) -> Tuple[str, ...]:
        labels = [self._msg(LABEL_CHANGE_DIRECTORY)]
        if is_admin:
            labels.append(self._msg(LABEL_SET_INTERVAL))
        labels.append(self._msg(LABEL_CANCEL))
        return tuple(labels)

    def _is_label(self, text: str, label_type: str) -> bool:
        return text.strip().casefold() == self._msg(label_type).casefold()

    def _finish(self, msg_type: str, **kwargs) -> Transition:
        return Start(restarted=False), Reply(self._msg(msg_type, **kwargs))

    # --- state handlers ---
    def _on_start(self, state: Start, user_id: int, text: str) -> Transition:
        is_admin = self._settings.is_admin(user_id)
        body = self._msg(MSG_MENU)
        if state.restarted:
            body = f"{self._msg(MSG_RESTARTED)}\n{body}"
        return AwaitingCommand(user_id=user_id, is_admin=is_admin), Reply(body, self._menu(is_admin))

    def _on_command(self, state: AwaitingCommand, user_id: int, text: str) -> Transition:
        menu = self._menu(state.is_admin)

        if self._is_label(text, LABEL_CHANGE_DIRECTORY):
            user = self._repo.get_user(user_id=state.user_id)
            descr = user.descr if user and user.descr else self._msg(MSG_DESCR_EMPTY)
            return AwaitingOrigin(prior=state), Reply(self._msg(MSG_CURRENT_DESCR, descr=descr), (KEEP_SENTINEL,))

        if self._is_label(text, LABEL_SET_INTERVAL):
            if not state.is_admin:
                logger.info("Interval change refused for non-admin user=%s", state.user_id)
                return state, Reply(self._msg(MSG_NO_RIGHTS), menu)
            value = self._settings.interval() // self._unit_sec
            return AwaitingInterval(prior=state), Reply(
                self._msg(MSG_CURRENT_INTERVAL, value=value, unit=self._unit_name),
                (KEEP_SENTINEL,),
            )

        if self._is_label(text, LABEL_CANCEL):
            return state, Reply(self._msg(MSG_NOTHING_TO_DO), menu)

        return state, Reply(self._msg(MSG_MENU), menu)

    def _on_origin(self, state: AwaitingOrigin, user_id: int, text: str) -> Transition:
        if text.strip() == KEEP_SENTINEL:
            return self._finish(MSG_UNCHANGED)

        self._repo.set_descr(user_id=state.prior.user_id, descr=text, now=int(self._clock()))
        logger.info("Directory text changed: user=%s", state.prior.user_id)
        return self._finish(MSG_DESCR_SAVED, descr=text)

    def _on_interval(self, state: AwaitingInterval, user_id: int, text: str) -> Transition:
        if text.strip() == KEEP_SENTINEL:
            return self._finish(MSG_UNCHANGED)

        if not state.prior.is_admin:
            return self._finish(MSG_NO_RIGHTS)

        try:
            value = parse_interval(text)
        except ValidationError:
            return self._finish(MSG_INTERVAL_INVALID, text=text)

        self._settings.set_interval(value * self._unit_sec)
        return self._finish(MSG_INTERVAL_SAVED, value=value, unit=self._unit_name)
