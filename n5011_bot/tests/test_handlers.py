import unittest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from telegram import ReplyKeyboardMarkup, ReplyKeyboardRemove
from telegram.constants import ChatType

from n5011_bot.bot.dialogue import Reply
from n5011_bot.bot.formatting import build_reply_markup
from n5011_bot.bot.handlers import on_group_message, on_private_message
from n5011_bot.core.models import Announce, Suppressed, SuppressReason


def _update(chat_type: str, *, text: str = "hi", is_bot: bool = False) -> MagicMock:
    update = MagicMock()
    update.effective_chat.id = -100
    update.effective_chat.type = chat_type
    update.effective_user.id = 42
    update.effective_user.is_bot = is_bot
    update.effective_message.text = text
    update.effective_message.date = datetime.fromtimestamp(200, tz=timezone.utc)
    update.effective_message.reply_text = AsyncMock()
    return update


class _Engine:
    def __init__(self, outcome) -> None:
        self.outcome = outcome
        self.calls = []

    def decide(self, user_id: int, now: int):
        self.calls.append((user_id, now))
        return self.outcome


class TestReplyMarkup(unittest.TestCase):
    def test_no_menu_removes_keyboard(self) -> None:
        self.assertIsInstance(build_reply_markup(None), ReplyKeyboardRemove)

    def test_menu_one_button_per_row(self) -> None:
        markup = build_reply_markup(("change directory", "cancel"))
        self.assertIsInstance(markup, ReplyKeyboardMarkup)
        self.assertEqual([[b.text for b in row] for row in markup.keyboard], [["change directory"], ["cancel"]])


class TestGroupHandler(unittest.IsolatedAsyncioTestCase):
    async def test_announcement_is_sent_as_reply(self) -> None:
        update = _update(ChatType.SUPERGROUP)
        engine = _Engine(Announce("Alice, 102 sysop"))
        await on_group_message(update, MagicMock(), engine=engine)
        self.assertEqual(engine.calls, [(42, 200)])
        update.effective_message.reply_text.assert_awaited_once_with("Alice, 102 sysop")

    async def test_suppressed_sends_nothing(self) -> None:
        update = _update(ChatType.GROUP)
        await on_group_message(update, MagicMock(), engine=_Engine(Suppressed(SuppressReason.TOO_SOON)))
        update.effective_message.reply_text.assert_not_awaited()

    async def test_private_chats_and_bots_are_ignored(self) -> None:
        engine = _Engine(Announce("x"))
        await on_group_message(_update(ChatType.PRIVATE), MagicMock(), engine=engine)
        await on_group_message(_update(ChatType.GROUP, is_bot=True), MagicMock(), engine=engine)
        self.assertEqual(engine.calls, [])


class TestPrivateHandler(unittest.IsolatedAsyncioTestCase):
    async def test_dialogue_reply_is_sent(self) -> None:
        update = _update(ChatType.PRIVATE, text="change directory")
        dialogue = MagicMock()
        dialogue.handle.return_value = Reply("Send the new text", ("/",))
        await on_private_message(update, MagicMock(), dialogue=dialogue)
        dialogue.handle.assert_called_once_with(chat_id=-100, user_id=42, text="change directory")
        args, kwargs = update.effective_message.reply_text.await_args
        self.assertEqual(args, ("Send the new text",))
        self.assertIsInstance(kwargs["reply_markup"], ReplyKeyboardMarkup)


if __name__ == "__main__":
    unittest.main()
