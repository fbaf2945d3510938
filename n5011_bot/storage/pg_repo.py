from __future__ import annotations

from contextlib import contextmanager
from typing import Optional
import logging

from n5011_bot.core.errors import StorageError
from n5011_bot.core.models import UserState
from n5011_bot.storage.repo import Repository

logger = logging.getLogger(__name__)


class PostgresRepository(Repository):
    def __init__(self, *, dsn: str, migrations_sql_path: str) -> None:
        # Import psycopg only when PostgreSQL repo is instantiated
        try:
            import psycopg
            from psycopg.rows import dict_row
        except ModuleNotFoundError:
            raise ModuleNotFoundError(
                "psycopg is not installed. Install it with: pip install 'psycopg[binary]>=3.1'"
            )

        self._psycopg = psycopg
        self._dict_row = dict_row
        self._dsn = dsn
        self._migrations_sql_path = migrations_sql_path
        self._init_db()

    def _connect(self):
        return self._psycopg.connect(self._dsn, row_factory=self._dict_row)

    @contextmanager
    def _cursor(self):
        try:
            with self._connect() as con:
                with con.cursor() as cur:
                    yield cur
                con.commit()
        except self._psycopg.Error as e:
            raise StorageError(f"postgres query failed: {e}") from e

    def _init_db(self) -> None:
        with open(self._migrations_sql_path, "r", encoding="utf-8") as f:
            sql = f.read()
        with self._cursor() as cur:
            cur.execute(sql)
        logger.info("Database schema checked")

    # --- users ---
    def get_user(self, *, user_id: int) -> Optional[UserState]:
        with self._cursor() as cur:
            row = cur.execute(
                "SELECT user_id,addr,descr,last_seen,short_count FROM users WHERE user_id=%s",
                (user_id,),
            ).fetchone()
        if not row:
            return None
        return UserState(**row)

    def insert_user(self, state: UserState) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO users(user_id,addr,descr,last_seen,short_count)
                VALUES(%s,%s,%s,%s,%s)
                ON CONFLICT (user_id) DO NOTHING
                """,
                (state.user_id, state.addr, state.descr, state.last_seen, state.short_count),
            )

    def update_announcement(self, *, user_id: int, last_seen: int, short_count: int) -> None:
        with self._cursor() as cur:
            cur.execute(
                "UPDATE users SET last_seen=%s, short_count=%s WHERE user_id=%s",
                (last_seen, short_count, user_id),
            )
            if cur.rowcount != 1:
                logger.warning("update_announcement: user=%s updated %s rows", user_id, cur.rowcount)

    def set_addr(self, *, user_id: int, addr: str) -> None:
        with self._cursor() as cur:
            cur.execute("UPDATE users SET addr=%s WHERE user_id=%s", (addr, user_id))
            if cur.rowcount != 1:
                logger.warning("set_addr: user=%s updated %s rows", user_id, cur.rowcount)

    def set_descr(self, *, user_id: int, descr: str, now: int) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO users(user_id,descr,last_seen,short_count)
                VALUES(%s,%s,%s,0)
                ON CONFLICT (user_id) DO UPDATE SET descr=EXCLUDED.descr
                """,
                (user_id, descr, now),
            )

    # --- settings ---
    def get_interval(self) -> Optional[int]:
        with self._cursor() as cur:
            row = cur.execute("SELECT announcement_interval FROM settings WHERE id=1").fetchone()
        return int(row["announcement_interval"]) if row else None

    def set_interval(self, *, seconds: int) -> None:
        with self._cursor() as cur:
            cur.execute(
                """
                INSERT INTO settings(id,announcement_interval) VALUES(1,%s)
                ON CONFLICT (id) DO UPDATE SET announcement_interval=EXCLUDED.announcement_interval
                """,
                (seconds,),
            )
