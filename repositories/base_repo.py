# repositories/base_repo.py
from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Sequence, TypeVar

import aiomysql

from db.pool import DbPool
from db.tx import get_cursor, transaction

T = TypeVar("T")


class BaseRepo:
    """
    Small SQL helpers shared by the concrete repositories.
    Repos hold no bracket rules; they read and write rows.
    """

    def __init__(self, db: DbPool) -> None:
        self._db = db

    @property
    def pool(self) -> aiomysql.Pool:
        return self._db.pool

    async def fetch_one(self, sql: str, params: Sequence[Any] | None = None) -> Mapping[str, Any] | None:
        async with get_cursor(self.pool, dict_rows=True) as cur:
            await cur.execute(sql, params or ())
            return await cur.fetchone()

    async def fetch_all(self, sql: str, params: Sequence[Any] | None = None) -> list[Mapping[str, Any]]:
        async with get_cursor(self.pool, dict_rows=True) as cur:
            await cur.execute(sql, params or ())
            rows = await cur.fetchall()
            return list(rows or [])

    async def execute(self, sql: str, params: Sequence[Any] | None = None) -> int:
        async with transaction(self.pool, dict_rows=False) as (_conn, cur):
            await cur.execute(sql, params or ())
            return cur.rowcount

    async def insert_returning_id(self, sql: str, params: Sequence[Any] | None = None) -> int:
        async with transaction(self.pool, dict_rows=False) as (_conn, cur):
            await cur.execute(sql, params or ())
            return int(cur.lastrowid)

    async def in_tx(
        self,
        fn: Callable[[aiomysql.Connection, aiomysql.Cursor], Awaitable[T]],
        *,
        label: str = "transaction",
    ) -> T:
        """
        Run fn(conn, cur) inside one transaction.
        """
        async with transaction(self.pool, dict_rows=True, label=label) as (conn, cur):
            return await fn(conn, cur)
