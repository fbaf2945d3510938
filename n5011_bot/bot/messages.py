"""
Message localization service for bot messages.

Supports English ('en') and Russian ('ru') languages.
All messages are stored as templates with placeholders that are substituted at runtime.
"""

from __future__ import annotations

import logging
from typing import Literal, Final, Any

logger = logging.getLogger(__name__)

# Message type constants
MSG_RESTARTED: Final[str] = "restarted"
MSG_MENU: Final[str] = "menu"
MSG_CURRENT_DESCR: Final[str] = "current_descr"
MSG_DESCR_EMPTY: Final[str] = "descr_empty"
MSG_DESCR_SAVED: Final[str] = "descr_saved"
MSG_UNCHANGED: Final[str] = "unchanged"
MSG_CURRENT_INTERVAL: Final[str] = "current_interval"
MSG_INTERVAL_SAVED: Final[str] = "interval_saved"
MSG_INTERVAL_INVALID: Final[str] = "interval_invalid"
MSG_NO_RIGHTS: Final[str] = "no_rights"
MSG_NOTHING_TO_DO: Final[str] = "nothing_to_do"
MSG_STORAGE_UNAVAILABLE: Final[str] = "storage_unavailable"
MSG_NO_INFO: Final[str] = "no_info"

# Reply keyboard labels
LABEL_CHANGE_DIRECTORY: Final[str] = "label_change_directory"
LABEL_SET_INTERVAL: Final[str] = "label_set_interval"
LABEL_CANCEL: Final[str] = "label_cancel"

# Typed by the user to leave a value as it is
KEEP_SENTINEL: Final[str] = "/"

# Supported locales
SupportedLocale = Literal["en", "ru"]

# Translation dictionaries
_TRANSLATIONS: dict[SupportedLocale, dict[str, str]] = {
    "en": {
        MSG_RESTARTED: "The bot has been restarted, the previous conversation was lost.",
        MSG_MENU: "Choose a command with the buttons below.",
        MSG_CURRENT_DESCR: "Your current directory text: {descr}\nSend the new text or / to keep it.",
        MSG_DESCR_EMPTY: "(not set)",
        MSG_DESCR_SAVED: "Saved. Your directory text is now: {descr}",
        MSG_UNCHANGED: "Left unchanged.",
        MSG_CURRENT_INTERVAL: "Current announcement interval: {value} {unit}\nSend a new whole number or / to keep it.",
        MSG_INTERVAL_SAVED: "Saved. Announcement interval is now {value} {unit}.",
        MSG_INTERVAL_INVALID: "'{text}' is not a non-negative whole number. The interval is unchanged.",
        MSG_NO_RIGHTS: "Insufficient rights.",
        MSG_NOTHING_TO_DO: "Nothing to do.",
        MSG_STORAGE_UNAVAILABLE: "Storage is unavailable right now, please try again later.",
        MSG_NO_INFO: "[no info]",
        LABEL_CHANGE_DIRECTORY: "change directory",
        LABEL_SET_INTERVAL: "set interval",
        LABEL_CANCEL: "cancel",
    },
    "ru": {
        MSG_RESTARTED: "Бот был перезапущен, предыдущий диалог потерян.",
        MSG_MENU: "Выберите команду на кнопке внизу.",
        MSG_CURRENT_DESCR: "Ваш текущий ориджин: {descr}\nВведите новый ориджин или / чтобы оставить как есть.",
        MSG_DESCR_EMPTY: "(не задан)",
        MSG_DESCR_SAVED: "Ваш ориджин сохранён: {descr}",
        MSG_UNCHANGED: "Оставлено без изменений.",
        MSG_CURRENT_INTERVAL: "Текущий интервал объявлений: {value} {unit}\nВведите новое целое число или / чтобы оставить как есть.",
        MSG_INTERVAL_SAVED: "Интервал объявлений теперь {value} {unit}.",
        MSG_INTERVAL_INVALID: "'{text}' не является неотрицательным целым числом. Интервал не изменён.",
        MSG_NO_RIGHTS: "Недостаточно прав.",
        MSG_NOTHING_TO_DO: "Нечего делать.",
        MSG_STORAGE_UNAVAILABLE: "База данных сейчас недоступна, попробуйте позже.",
        MSG_NO_INFO: "[нет информации]",
        LABEL_CHANGE_DIRECTORY: "изменить ориджин",
        LABEL_SET_INTERVAL: "задать интервал",
        LABEL_CANCEL: "отмена",
    },
}


def get_message(msg_type: str, locale: SupportedLocale = "en", **kwargs: Any) -> str:
    """
    Get a localized message by type and locale.

    Args:
        msg_type: Message type constant (e.g., MSG_MENU)
        locale: Language code ('en' or 'ru'). Defaults to 'en'
        **kwargs: Placeholder values to substitute in the message template

    Returns:
        Localized message string with placeholders substituted

    Raises:
        KeyError: If msg_type is not found in translations
        ValueError: If a placeholder required by the template is missing

    Example:
        >>> get_message(MSG_INTERVAL_SAVED, "en", value=7200, unit="sec")
        'Saved. Announcement interval is now 7200 sec.'
    """
    if locale not in _TRANSLATIONS:
        logger.warning("Unsupported locale: %s, falling back to 'en'", locale)
        locale = "en"

    translations = _TRANSLATIONS[locale]

    if msg_type not in translations:
        raise KeyError(f"Message type '{msg_type}' not found in translations for locale '{locale}'")

    template = translations[msg_type]

    try:
        return template.format(**kwargs)
    except KeyError as e:
        missing_key = str(e).strip("'")
        raise ValueError(f"Missing required placeholder '{missing_key}' for message type '{msg_type}'") from e
