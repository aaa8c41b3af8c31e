# db/tx.py
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Tuple

import aiomysql

logger = logging.getLogger(__name__)


def _cursor_cls(dict_rows: bool) -> type:
    return aiomysql.DictCursor if dict_rows else aiomysql.Cursor


@asynccontextmanager
async def get_cursor(
    pool: aiomysql.Pool, *, dict_rows: bool = True
) -> AsyncIterator[aiomysql.Cursor]:
    """
    Cursor for one-off statements on an autocommit connection.
    Rows come back as dicts unless dict_rows=False.
    """
    async with pool.acquire() as conn:
        async with conn.cursor(_cursor_cls(dict_rows)) as cur:
            yield cur


@asynccontextmanager
async def transaction(
    pool: aiomysql.Pool, *, dict_rows: bool = True, label: str = "transaction"
) -> AsyncIterator[Tuple[aiomysql.Connection, aiomysql.Cursor]]:
    """
    BEGIN ... COMMIT on one pooled connection. Any exception rolls back and
    propagates unchanged; label names the unit of work in the rollback log line.

        async with transaction(pool, label="bracket insert") as (conn, cur):
            await cur.execute(...)
    """
    async with pool.acquire() as conn:
        await conn.begin()
        try:
            async with conn.cursor(_cursor_cls(dict_rows)) as cur:
                yield conn, cur
        except Exception as e:
            logger.warning("Rolling back %s: %s: %s", label, type(e).__name__, e)
            await conn.rollback()
            raise
        await conn.commit()
        logger.debug("Committed %s", label)
