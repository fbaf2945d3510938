from pathlib import Path

from n5011_bot.storage import sqlite_repo
from n5011_bot.storage.sqlite_repo import SQLiteRepository

SQLITE_INIT = Path(sqlite_repo.__file__).resolve().parent / "sql" / "sqlite_init.sql"


def make_repo(td: str) -> SQLiteRepository:
    return SQLiteRepository(db_path=str(Path(td) / "bot.db"), migrations_sql_path=str(SQLITE_INIT))
