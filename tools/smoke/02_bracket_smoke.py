from __future__ import annotations

import os, sys
from uuid import uuid4

HERE = os.path.dirname(__file__)
ROOT = os.path.abspath(os.path.join(HERE, "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

import asyncio

from config import configure_logging, load_config
from db.pool import open_pool
from repositories.match_repo import MatchRepo
from repositories.player_repo import PlayerRepo
from repositories.tournament_repo import TournamentRepo
from services.bracket_service import BracketService
from services.tournament_service import TournamentService

async def main() -> None:
    cfg = load_config()
    configure_logging(cfg.log_level)

    run_id = os.getenv("SMOKE_RUN_ID") or f"smk_{uuid4().hex[:10]}"
    n_players = int(os.getenv("SMOKE_PLAYERS") or "6")

    db = await open_pool(cfg.mysql)
    try:
        brackets = BracketService(match_repo=MatchRepo(db))
        tournaments = TournamentService(
            tournament_repo=TournamentRepo(db),
            player_repo=PlayerRepo(db),
            bracket_service=brackets,
            randomize_default=cfg.randomize_players,
        )

        tid = await tournaments.create_tournament(
            name=f"SMOKE_{run_id}",
            player_names=[f"smoke-{run_id}-{i}" for i in range(1, n_players + 1)],
        )
        assert await brackets.verify(tournament_id=tid) == []

        reported = 0
        while True:
            ready = [m for m in await brackets.get_matches(tournament_id=tid) if m.is_ready]
            if not ready:
                break
            m = ready[0]
            await brackets.record_winner(match_id=m.match_id, winner_id=m.player2_id)
            reported += 1
            assert await brackets.verify(tournament_id=tid) == []

        data = await tournaments.get_tournament_data(tournament_id=tid)
        assert data.champion is not None, "no champion after every ready match was played"
    finally:
        await db.close()

    print(
        f"OK: bracket smoke passed. run_id={run_id} tournament_id={tid} "
        f"matches_reported={reported} champion={data.champion.name}"
    )

if __name__ == "__main__":
    asyncio.run(main())
