# db/pool.py
from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Optional

import aiomysql

from config import MySqlConfig

logger = logging.getLogger(__name__)


class DbPool:
    """
    Owns the one aiomysql pool used by every repository.
    start() once, share the instance, close() on shutdown.
    """

    def __init__(self) -> None:
        self._pool: Optional[aiomysql.Pool] = None

    @property
    def pool(self) -> aiomysql.Pool:
        if self._pool is None:
            raise RuntimeError("DB pool is not initialized. Call await DbPool.start() first.")
        return self._pool

    @property
    def started(self) -> bool:
        return self._pool is not None

    async def start(self, cfg: MySqlConfig) -> None:
        if self._pool is not None:
            return

        logger.info("Opening MySQL pool %s@%s:%s/%s", cfg.user, cfg.host, cfg.port, cfg.database)
        self._pool = await aiomysql.create_pool(
            host=cfg.host,
            port=cfg.port,
            user=cfg.user,
            password=cfg.password,
            db=cfg.database,
            minsize=cfg.minsize,
            maxsize=cfg.maxsize,
            connect_timeout=cfg.connect_timeout,
            autocommit=True,  # single statements need no explicit commit; see db.tx.transaction
            charset="utf8mb4",
        )
        await self.ping()

    async def ping(self) -> None:
        """Raises if the pool cannot run a trivial query."""
        async with self.pool.acquire() as conn:
            async with conn.cursor() as cur:
                await cur.execute("SELECT 1;")
                await cur.fetchone()

    async def close(self) -> None:
        if self._pool is None:
            return
        self._pool.close()
        await self._pool.wait_closed()
        self._pool = None
        logger.info("MySQL pool closed")


async def open_pool(cfg: MySqlConfig) -> DbPool:
    db = DbPool()
    await db.start(cfg)
    return db


def describe(cfg: MySqlConfig) -> dict:
    """Connection settings with the password masked, for log lines."""
    out = asdict(cfg)
    out["password"] = "***" if cfg.password else ""
    return out
