import os
import unittest
from unittest.mock import patch

from n5011_bot.core.config import AppConfig
from n5011_bot.core.errors import ConfigurationError

_BASE_ENV = {
    "BOT_TOKEN": "123:abc",
    "ADMIN_1": "11",
    "ADMIN_2": "22",
    "DIRECTORY_URL": "https://example.org/nodes/{user_id}",
}


def _from_env(**overrides) -> AppConfig:
    env = dict(_BASE_ENV)
    env.update(overrides)
    env = {k: v for k, v in env.items() if v is not None}
    with patch.dict(os.environ, env, clear=True), patch("n5011_bot.core.config.load_dotenv"):
        return AppConfig.from_env()


class TestConfigParsing(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = _from_env()
        self.assertEqual(cfg.bot_token, "123:abc")
        self.assertEqual(cfg.admin_ids, (11, 22))
        self.assertEqual(cfg.announcement_interval_sec, 3600)
        self.assertEqual(cfg.interval_unit_sec, 1)
        self.assertEqual(cfg.strip_prefix, "2:5011/")
        self.assertEqual(cfg.db_url, "sqlite:///data/bot.db")
        self.assertEqual(cfg.locale, "en")
        self.assertIsNone(cfg.webhook_host)

    def test_overrides(self) -> None:
        cfg = _from_env(
            ANNOUNCEMENT_INTERVAL="30",
            INTERVAL_UNIT_SEC="60",
            INTERVAL_UNIT_NAME="min",
            LOCALE="RU",
            WEBHOOK_HOST="bot.example.org",
            PORT="8080",
            DIRECTORY_TIMEOUT_SEC="2.5",
        )
        self.assertEqual(cfg.announcement_interval_sec, 30)
        self.assertEqual(cfg.interval_unit_sec, 60)
        self.assertEqual(cfg.interval_unit_name, "min")
        self.assertEqual(cfg.locale, "ru")
        self.assertEqual(cfg.webhook_host, "bot.example.org")
        self.assertEqual(cfg.port, 8080)
        self.assertEqual(cfg.directory_timeout_sec, 2.5)

    def test_required_values(self) -> None:
        for name in ("BOT_TOKEN", "ADMIN_1", "ADMIN_2", "DIRECTORY_URL"):
            with self.assertRaises(ConfigurationError, msg=name):
                _from_env(**{name: None})

    def test_malformed_values(self) -> None:
        bad = [
            {"ADMIN_1": "alice"},
            {"ANNOUNCEMENT_INTERVAL": "-1"},
            {"ANNOUNCEMENT_INTERVAL": "soon"},
            {"INTERVAL_UNIT_SEC": "0"},
            {"DIRECTORY_URL": "https://example.org/nodes"},
            {"DIRECTORY_TIMEOUT_SEC": "fast"},
            {"LOCALE": "de"},
        ]
        for overrides in bad:
            with self.assertRaises(ConfigurationError, msg=repr(overrides)):
                _from_env(**overrides)

    def test_configuration_error_is_runtime_error(self) -> None:
        with self.assertRaises(RuntimeError):
            _from_env(BOT_TOKEN=None)


if __name__ == "__main__":
    unittest.main()
