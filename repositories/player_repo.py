# repositories/player_repo.py
from __future__ import annotations

from typing import Any, Mapping, Sequence

from repositories.base_repo import BaseRepo


class PlayerRepo(BaseRepo):
    async def create_players(
        self,
        *,
        tournament_id: int,
        players: Sequence[tuple[str, int]],
    ) -> list[int]:
        """
        players: (name, seed_position) pairs.
        Returns player ids in the same order. All rows or none.
        """

        async def _insert(_conn, cur) -> list[int]:
            ids: list[int] = []
            for name, seed_position in players:
                await cur.execute(
                    """
                    INSERT INTO player (tournament_id, name, seed_position)
                    VALUES (%s, %s, %s);
                    """,
                    (tournament_id, name, seed_position),
                )
                ids.append(int(cur.lastrowid))
            return ids

        return await self.in_tx(_insert, label=f"player insert for tournament {tournament_id}")

    async def list_players(self, *, tournament_id: int) -> list[Mapping[str, Any]]:
        return await self.fetch_all(
            """
            SELECT player_id, tournament_id, name, seed_position
            FROM player
            WHERE tournament_id=%s
            ORDER BY seed_position, player_id;
            """,
            (tournament_id,),
        )
