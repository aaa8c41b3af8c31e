# repositories/tournament_repo.py
from __future__ import annotations

from typing import Any, Mapping

from repositories.base_repo import BaseRepo


class TournamentRepo(BaseRepo):
    async def create_tournament(self, *, name: str) -> int:
        return await self.insert_returning_id(
            "INSERT INTO tournament (name) VALUES (%s);",
            (name,),
        )

    async def get_tournament(self, *, tournament_id: int) -> Mapping[str, Any] | None:
        return await self.fetch_one(
            """
            SELECT tournament_id, name, created_at
            FROM tournament
            WHERE tournament_id=%s;
            """,
            (tournament_id,),
        )

    async def list_tournaments(self) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT tournament_id, name, created_at
            FROM tournament
            ORDER BY created_at DESC, tournament_id DESC;
            """
        )

    async def delete_tournament(self, *, tournament_id: int) -> int:
        # players and matches go with it (ON DELETE CASCADE)
        return await self.execute(
            "DELETE FROM tournament WHERE tournament_id=%s;",
            (tournament_id,),
        )

    async def count_tournaments(self) -> int:
        row = await self.fetch_one("SELECT COUNT(*) AS n FROM tournament;")
        return int(row["n"]) if row else 0
