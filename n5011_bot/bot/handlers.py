from __future__ import annotations

import logging
import time

from telegram import Update
from telegram.constants import ChatType
from telegram.error import TelegramError
from telegram.ext import ContextTypes

from n5011_bot.bot.dialogue import ConfigDialogue
from n5011_bot.bot.formatting import build_reply_markup
from n5011_bot.core.models import Announce
from n5011_bot.core.throttle import ThrottleEngine

logger = logging.getLogger(__name__)


async def on_group_message(update: Update, context: ContextTypes.DEFAULT_TYPE, *, engine: ThrottleEngine) -> None:
    """
    Any message in the channel group may trigger an announcement of the
    author's directory address, sent as a reply to that message.
    """
    msg = update.effective_message
    chat = update.effective_chat
    user = update.effective_user
    if not msg or not chat or not user:
        return

    if chat.type not in (ChatType.GROUP, ChatType.SUPERGROUP):
        return
    if user.is_bot:
        return

    now = int(msg.date.timestamp()) if msg.date else int(time.time())
    outcome = engine.decide(user.id, now)
    if not isinstance(outcome, Announce):
        logger.debug("Suppressed: chat=%s user=%s reason=%s", chat.id, user.id, outcome.reason.value)
        return

    try:
        await msg.reply_text(outcome.text)
    except TelegramError as e:
        logger.warning("Failed to send announcement chat=%s user=%s: %s", chat.id, user.id, e)


async def on_private_message(update: Update, context: ContextTypes.DEFAULT_TYPE, *, dialogue: ConfigDialogue) -> None:
    msg = update.effective_message
    chat = update.effective_chat
    user = update.effective_user
    if not msg or not chat or not user or msg.text is None:
        return

    reply = dialogue.handle(chat_id=chat.id, user_id=user.id, text=msg.text)
    try:
        await msg.reply_text(reply.text, reply_markup=build_reply_markup(reply.menu))
    except TelegramError as e:
        logger.warning("Failed to answer in private chat %s: %s", chat.id, e)
