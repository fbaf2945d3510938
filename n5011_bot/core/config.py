from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from n5011_bot.core.errors import ConfigurationError


@dataclass(frozen=True)
class AppConfig:
    bot_token: str
    admin_ids: tuple[int, ...]
    directory_url: str

    db_url: str = "sqlite:///data/bot.db"

    announcement_interval_sec: int = 3600

    # Interval is shown and entered in these units in the settings dialogue
    interval_unit_sec: int = 1
    interval_unit_name: str = "sec"

    directory_timeout_sec: float = 10.0
    strip_prefix: str = "2:5011/"

    locale: str = "en"

    webhook_host: Optional[str] = None
    port: int = 8443

    allowed_updates: tuple[str, ...] = (
        "message",
    )

    @staticmethod
    def from_env() -> "AppConfig":
        load_dotenv()  # Load .env file
        bot_token = os.getenv("BOT_TOKEN", "").strip()
        if not bot_token:
            raise ConfigurationError("BOT_TOKEN is required.")

        def _required(name: str) -> str:
            raw = os.getenv(name, "").strip()
            if not raw:
                raise ConfigurationError(f"{name} is required.")
            return raw

        def _int(name: str, default: Optional[int] = None) -> int:
            raw = os.getenv(name, "").strip()
            if not raw:
                if default is None:
                    raise ConfigurationError(f"{name} is required.")
                return default
            try:
                return int(raw)
            except ValueError as ex:
                raise ConfigurationError(f"{name} must be int. Got '{raw}'.") from ex

        interval = _int("ANNOUNCEMENT_INTERVAL", 3600)
        if interval < 0:
            raise ConfigurationError("ANNOUNCEMENT_INTERVAL must not be negative.")

        unit_sec = _int("INTERVAL_UNIT_SEC", 1)
        if unit_sec <= 0:
            raise ConfigurationError("INTERVAL_UNIT_SEC must be positive.")

        directory_url = _required("DIRECTORY_URL")
        if "{user_id}" not in directory_url:
            raise ConfigurationError("DIRECTORY_URL must contain a '{user_id}' placeholder.")

        raw_timeout = os.getenv("DIRECTORY_TIMEOUT_SEC", "10").strip()
        try:
            timeout = float(raw_timeout)
        except ValueError as ex:
            raise ConfigurationError(f"DIRECTORY_TIMEOUT_SEC must be a number. Got '{raw_timeout}'.") from ex

        locale = os.getenv("LOCALE", "en").strip().lower()
        if locale not in ("en", "ru"):
            raise ConfigurationError("LOCALE must be 'en' or 'ru'.")

        return AppConfig(
            bot_token=bot_token,
            admin_ids=(_int("ADMIN_1"), _int("ADMIN_2")),
            directory_url=directory_url,
            db_url=os.getenv("DB_URL", "sqlite:///data/bot.db").strip(),
            announcement_interval_sec=interval,
            interval_unit_sec=unit_sec,
            interval_unit_name=os.getenv("INTERVAL_UNIT_NAME", "sec").strip() or "sec",
            directory_timeout_sec=timeout,
            strip_prefix=os.getenv("STRIP_PREFIX", "2:5011/").strip(),
            locale=locale,
            webhook_host=os.getenv("WEBHOOK_HOST", "").strip() or None,
            port=_int("PORT", 8443),
        )


def get_app_version() -> str:
    """
    Get application version from pyproject.toml.

    Returns:
        Version string (e.g., "0.1.0")
    """
    try:
        try:
            from importlib.metadata import version
            return version("n5011-bot")
        except Exception:
            pass

        project_root = Path(__file__).parent.parent.parent
        pyproject_path = project_root / "pyproject.toml"

        if pyproject_path.exists():
            with open(pyproject_path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line.startswith("version ="):
                        return line.split("=", 1)[1].strip().strip('"').strip("'")

        return "unknown"
    except Exception:
        return "unknown"
