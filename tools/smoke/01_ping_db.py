from __future__ import annotations

import os, sys

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import asyncio
import logging

from config import configure_logging, load_config
from db.pool import describe, open_pool
from repositories.tournament_repo import TournamentRepo

async def main() -> None:
    cfg = load_config()
    configure_logging(cfg.log_level)
    logging.info("Connecting with %s", describe(cfg.mysql))

    db = await open_pool(cfg.mysql)
    try:
        await db.ping()
        n = await TournamentRepo(db).count_tournaments()
    finally:
        await db.close()

    print(f"OK: DB pool ping succeeded. tournaments={n}")

if __name__ == "__main__":
    asyncio.run(main())
