from __future__ import annotations

import logging
import os
from pathlib import Path

from telegram.ext import Application, MessageHandler, filters

from n5011_bot.bot.dialogue import ConfigDialogue
from n5011_bot.bot.handlers import on_group_message, on_private_message
from n5011_bot.bot.messages import MSG_NO_INFO, get_message
from n5011_bot.bot.scheduler import make_refresh_scheduler
from n5011_bot.core.config import AppConfig, get_app_version
from n5011_bot.core.errors import ConfigurationError, StorageError
from n5011_bot.core.settings import GlobalSettings
from n5011_bot.core.throttle import ThrottleEngine
from n5011_bot.directory.client import DirectoryClient
from n5011_bot.directory.refresh import DirectoryRefresher
from n5011_bot.storage.pg_repo import PostgresRepository
from n5011_bot.storage.repo import Repository
from n5011_bot.storage.sqlite_repo import SQLiteRepository


logger = logging.getLogger(__name__)

SQL_DIR = Path(__file__).resolve().parent / "storage" / "sql"

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s - %(message)s"


def _sqlite_path_from_db_url(db_url: str) -> str:
    # Expected: sqlite:///data/bot.db
    if not db_url.startswith("sqlite:///"):
        raise ConfigurationError("DB_URL must be sqlite:///... or postgresql://...")
    return db_url.replace("sqlite:///", "", 1)


def _is_postgres(db_url: str) -> bool:
    """Check if DB_URL is a PostgreSQL connection string."""
    return db_url.startswith("postgresql://") or db_url.startswith("postgres://")


def _build_repo(cfg: AppConfig) -> Repository:
    """Build the appropriate repository based on DB_URL."""
    if _is_postgres(cfg.db_url):
        logger.info("Using PostgreSQL repository")
        return PostgresRepository(
            dsn=cfg.db_url,
            migrations_sql_path=str(SQL_DIR / "postgres_init.sql"),
        )

    # Default to SQLite
    logger.info("Using SQLite repository: %s", cfg.db_url)
    db_path = _sqlite_path_from_db_url(cfg.db_url)
    return SQLiteRepository(db_path=db_path, migrations_sql_path=str(SQL_DIR / "sqlite_init.sql"))


async def _post_init(app: Application, *, settings: GlobalSettings) -> None:
    try:
        interval = settings.interval()
    except StorageError as e:
        logger.error("Cannot read announcement interval at startup: %s", e)
        return
    logger.info("N5011 bot %s started. Announcement interval=%s sec", get_app_version(), interval)


def build_app(*, cfg: AppConfig) -> Application:
    repo = _build_repo(cfg)
    settings = GlobalSettings(repo=repo, admin_ids=cfg.admin_ids, default_interval=cfg.announcement_interval_sec)

    application = Application.builder().token(cfg.bot_token).build()
    if application.job_queue is None:
        raise ConfigurationError("PTB JobQueue is unavailable. Install python-telegram-bot[job-queue].")

    refresher = DirectoryRefresher(
        repo=repo,
        fetcher=DirectoryClient(url_template=cfg.directory_url, timeout_sec=cfg.directory_timeout_sec),
        strip_prefix=cfg.strip_prefix,
    )
    engine = ThrottleEngine(
        repo=repo,
        settings=settings,
        schedule_refresh=make_refresh_scheduler(application, refresher),
        placeholder=get_message(MSG_NO_INFO, cfg.locale),
    )
    dialogue = ConfigDialogue(
        repo=repo,
        settings=settings,
        locale=cfg.locale,
        interval_unit_sec=cfg.interval_unit_sec,
        interval_unit_name=cfg.interval_unit_name,
    )

    # Settings dialogue in private chats
    application.add_handler(
        MessageHandler(filters.TEXT & filters.ChatType.PRIVATE, lambda u, c: on_private_message(u, c, dialogue=dialogue))
    )

    # Channel messages
    application.add_handler(
        MessageHandler(
            filters.ChatType.GROUPS & ~filters.COMMAND & ~filters.StatusUpdate.ALL,
            lambda u, c: on_group_message(u, c, engine=engine),
        )
    )

    application.post_init = lambda app: _post_init(app, settings=settings)

    return application


def main() -> None:
    cfg = AppConfig.from_env()

    # Reduce verbosity for noisy third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    # Root handler that redacts the bot token from output
    class RedactingFormatter(logging.Formatter):
        def format(self, record: logging.LogRecord) -> str:
            msg = super().format(record)
            try:
                return msg.replace(cfg.bot_token, "<BOT_TOKEN_REDACTED>")
            except Exception:
                return msg

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    stream_h = logging.StreamHandler()
    stream_h.setFormatter(RedactingFormatter(LOG_FORMAT))
    root.addHandler(stream_h)
    root.setLevel(os.getenv("LOG_LEVEL", "INFO"))

    logger.info("Starting N5011 bot...")
    app = build_app(cfg=cfg)

    if cfg.webhook_host:
        url_path = f"bot{cfg.bot_token}"
        app.run_webhook(
            listen="0.0.0.0",
            port=cfg.port,
            url_path=url_path,
            webhook_url=f"https://{cfg.webhook_host}/{url_path}",
            allowed_updates=list(cfg.allowed_updates),
            close_loop=False,
        )
        return

    # Polling mode
    app.run_polling(
        allowed_updates=list(cfg.allowed_updates),
        close_loop=False,
    )


if __name__ == "__main__":
    main()
