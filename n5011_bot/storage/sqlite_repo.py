from __future__ import annotations

import logging
import os
import sqlite3
from contextlib import contextmanager
from typing import Optional

from n5011_bot.core.errors import StorageError
from n5011_bot.core.models import UserState
from n5011_bot.storage.repo import Repository

logger = logging.getLogger(__name__)


def _ensure_dir(path: str) -> None:
    d = os.path.dirname(path)
    if d:
        os.makedirs(d, exist_ok=True)


class SQLiteRepository(Repository):
    def __init__(self, *, db_path: str, migrations_sql_path: str) -> None:
        _ensure_dir(db_path)
        self._db_path = db_path
        self._migrations_sql_path = migrations_sql_path
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        con = sqlite3.connect(self._db_path, timeout=30)
        con.row_factory = sqlite3.Row
        return con

    def _init_db(self) -> None:
        with open(self._migrations_sql_path, "r", encoding="utf-8") as f:
            sql = f.read()
        with self._tx() as con:
            con.executescript(sql)

    @contextmanager
    def _tx(self):
        try:
            con = self._connect()
        except sqlite3.Error as e:
            raise StorageError(f"sqlite connect failed: {e}") from e
        try:
            yield con
            con.commit()
        except sqlite3.Error as e:
            con.rollback()
            raise StorageError(f"sqlite query failed: {e}") from e
        except Exception:
            con.rollback()
            raise
        finally:
            con.close()

    # --- users ---
    def get_user(self, *, user_id: int) -> Optional[UserState]:
        with self._tx() as con:
            row = con.execute(
                "SELECT user_id,addr,descr,last_seen,short_count FROM users WHERE user_id=?",
                (user_id,),
            ).fetchone()
        if row is None:
            return None
        return UserState(
            user_id=row["user_id"],
            addr=row["addr"],
            descr=row["descr"],
            last_seen=row["last_seen"],
            short_count=row["short_count"],
        )

    def insert_user(self, state: UserState) -> None:
        with self._tx() as con:
            con.execute(
                "INSERT OR IGNORE INTO users(user_id,addr,descr,last_seen,short_count) VALUES(?,?,?,?,?)",
                (state.user_id, state.addr, state.descr, state.last_seen, state.short_count),
            )

    def update_announcement(self, *, user_id: int, last_seen: int, short_count: int) -> None:
        with self._tx() as con:
            cur = con.execute(
                "UPDATE users SET last_seen=?, short_count=? WHERE user_id=?",
                (last_seen, short_count, user_id),
            )
            if cur.rowcount != 1:
                logger.warning("update_announcement: user=%s updated %s rows", user_id, cur.rowcount)

    def set_addr(self, *, user_id: int, addr: str) -> None:
        with self._tx() as con:
            cur = con.execute("UPDATE users SET addr=? WHERE user_id=?", (addr, user_id))
            if cur.rowcount != 1:
                logger.warning("set_addr: user=%s updated %s rows", user_id, cur.rowcount)

    def set_descr(self, *, user_id: int, descr: str, now: int) -> None:
        with self._tx() as con:
            con.execute(
                """
                INSERT INTO users(user_id,descr,last_seen,short_count)
                VALUES(?,?,?,0)
                ON CONFLICT(user_id) DO UPDATE SET descr=excluded.descr
                """,
                (user_id, descr, now),
            )

    # --- settings ---
    def get_interval(self) -> Optional[int]:
        with self._tx() as con:
            row = con.execute("SELECT announcement_interval FROM settings WHERE id=1").fetchone()
        return int(row["announcement_interval"]) if row else None

    def set_interval(self, *, seconds: int) -> None:
        with self._tx() as con:
            con.execute(
                """
                INSERT INTO settings(id,announcement_interval) VALUES(1,?)
                ON CONFLICT(id) DO UPDATE SET announcement_interval=excluded.announcement_interval
                """,
                (seconds,),
            )
