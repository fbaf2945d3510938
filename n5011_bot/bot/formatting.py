from __future__ import annotations

from typing import Optional, Sequence, Union

from telegram import KeyboardButton, ReplyKeyboardMarkup, ReplyKeyboardRemove


def build_reply_markup(menu: Optional[Sequence[str]]) -> Union[ReplyKeyboardMarkup, ReplyKeyboardRemove]:
    if not menu:
        return ReplyKeyboardRemove()
    return ReplyKeyboardMarkup(
        [[KeyboardButton(label)] for label in menu],
        resize_keyboard=True,
        one_time_keyboard=True,
    )
