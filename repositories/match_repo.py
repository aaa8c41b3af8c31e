# repositories/match_repo.py
from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence

from domain.models import Match
from repositories.base_repo import BaseRepo

UPDATABLE_COLUMNS = ("player1_id", "player2_id", "winner_id", "is_bye")


class StaleMatchError(Exception):
    """A row changed between read and write; the transaction rolled back."""


class MatchRepo(BaseRepo):
    async def create_matches(self, *, tournament_id: int, matches: Sequence[Match]) -> list[int]:
        """
        Insert a whole bracket skeleton in one transaction.
        Returns match ids in input order.
        """

        async def _insert(_conn, cur) -> list[int]:
            ids: list[int] = []
            for m in matches:
                await cur.execute(
                    """
                    INSERT INTO bracket_match
                      (tournament_id, round_no, match_no,
                       player1_id, player2_id, winner_id, is_bye)
                    VALUES
                      (%s, %s, %s, %s, %s, %s, %s);
                    """,
                    (
                        tournament_id,
                        m.round_no,
                        m.match_no,
                        m.player1_id,
                        m.player2_id,
                        m.winner_id,
                        1 if m.is_bye else 0,
                    ),
                )
                ids.append(int(cur.lastrowid))
            return ids

        return await self.in_tx(_insert, label=f"bracket insert for tournament {tournament_id}")

    async def list_matches(self, *, tournament_id: int, round_no: int | None = None) -> list[Mapping[str, Any]]:
        if round_no is None:
            return await self.fetch_all(
                """
                SELECT *
                FROM bracket_match
                WHERE tournament_id=%s
                ORDER BY round_no, match_no;
                """,
                (tournament_id,),
            )
        return await self.fetch_all(
            """
            SELECT *
            FROM bracket_match
            WHERE tournament_id=%s AND round_no=%s
            ORDER BY match_no;
            """,
            (tournament_id, round_no),
        )

    async def get_match(self, *, match_id: int) -> Mapping[str, Any] | None:
        return await self.fetch_one(
            "SELECT * FROM bracket_match WHERE match_id=%s;",
            (match_id,),
        )

    async def update_match(self, *, match_id: int, fields: Mapping[str, Any]) -> Optional[Match]:
        """
        Partial update of slot/result columns; returns the row as stored afterwards,
        or None when the match does not exist. Unknown columns are rejected.
        """
        unknown = set(fields) - set(UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Cannot update bracket_match columns: {sorted(unknown)}")

        cols = [c for c in UPDATABLE_COLUMNS if c in fields]

        async def _update(_conn, cur) -> Optional[Match]:
            if cols:
                assignments = ", ".join(f"{c}=%s" for c in cols)
                await cur.execute(
                    f"UPDATE bracket_match SET {assignments} WHERE match_id=%s;",
                    (*[_db_value(c, fields[c]) for c in cols], match_id),
                )
            await cur.execute("SELECT * FROM bracket_match WHERE match_id=%s;", (match_id,))
            row = await cur.fetchone()
            return match_from_row(row) if row else None

        return await self.in_tx(_update, label=f"update of match {match_id}")

    async def apply_updates(self, *, updates: Sequence[Match], before: Mapping[int, Match]) -> None:
        """
        Write the slot/result columns of every match in updates, in one transaction.

        before maps match_id -> the match as it was read when the updates were
        computed. A row is only written while it still holds exactly those
        values; if another writer changed any of them first, StaleMatchError is
        raised and nothing is committed.
        """
        for m in updates:
            if m.match_id is None:
                raise ValueError(f"{m.code} has no match_id; persist the bracket first.")
            if m.match_id not in before:
                raise ValueError(f"{m.code} has no prior state to guard the write with.")

        async def _write(_conn, cur) -> None:
            for m in updates:
                prior = before[m.match_id]
                await cur.execute(
                    """
                    UPDATE bracket_match
                    SET player1_id=%s, player2_id=%s, winner_id=%s, is_bye=%s
                    WHERE match_id=%s
                      AND player1_id <=> %s AND player2_id <=> %s
                      AND winner_id <=> %s AND is_bye=%s;
                    """,
                    (
                        *_slot_values(m),
                        m.match_id,
                        *_slot_values(prior),
                    ),
                )
                if cur.rowcount == 0:
                    raise StaleMatchError(f"{m.code} (match {m.match_id}) was changed by another writer.")

        await self.in_tx(_write, label=f"advancement of {len(updates)} matches")


def match_from_row(r: Mapping[str, Any]) -> Match:
    def _opt(key: str) -> Optional[int]:
        return int(r[key]) if r.get(key) is not None else None

    return Match(
        round_no=int(r["round_no"]),
        match_no=int(r["match_no"]),
        player1_id=_opt("player1_id"),
        player2_id=_opt("player2_id"),
        winner_id=_opt("winner_id"),
        is_bye=bool(r.get("is_bye")),
        match_id=int(r["match_id"]),
        tournament_id=int(r["tournament_id"]),
    )


def _slot_values(m: Match) -> tuple[Optional[int], Optional[int], Optional[int], int]:
    return m.player1_id, m.player2_id, m.winner_id, 1 if m.is_bye else 0


def _db_value(column: str, value: Any) -> Any:
    if column == "is_bye":
        return 1 if value else 0
    return value
