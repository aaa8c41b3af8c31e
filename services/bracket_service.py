# services/bracket_service.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from domain.models import Match, Player, round_title
from engine import builder
from engine.advancer import AdvanceResult, record_winner
from engine.errors import MatchNotFoundError
from engine.verifier import IntegrityViolation, verify_bracket
from repositories.match_repo import MatchRepo, StaleMatchError, match_from_row

logger = logging.getLogger(__name__)


class BracketServiceError(Exception):
    pass


class BracketAlreadyExistsError(BracketServiceError):
    pass


class BracketStateError(BracketServiceError):
    pass


@dataclass(frozen=True)
class RoundProgress:
    round_no: int
    title: str
    completed: int
    total: int

    @property
    def is_complete(self) -> bool:
        return self.completed == self.total


def round_progress(matches: Sequence[Match]) -> list[RoundProgress]:
    """
    Per-round completion counts. Byes count as completed (they carry a winner).
    """
    if not matches:
        return []
    total_rounds = max(m.round_no for m in matches)
    out: list[RoundProgress] = []
    for round_no in range(1, total_rounds + 1):
        ms = [m for m in matches if m.round_no == round_no]
        out.append(
            RoundProgress(
                round_no=round_no,
                title=round_title(round_no, total_rounds),
                completed=sum(1 for m in ms if m.winner_id is not None),
                total=len(ms),
            )
        )
    return out


def champion_of(matches: Sequence[Match]) -> Optional[int]:
    if not matches:
        return None
    final_round = max(m.round_no for m in matches)
    finals = [m for m in matches if m.round_no == final_round]
    return finals[0].winner_id if len(finals) == 1 else None


class BracketService:
    """
    Persists brackets and results around the pure engine.

    Each call loads one tournament's matches, lets the engine compute the new
    state, then writes only the changed rows back in one transaction.
    """

    def __init__(self, match_repo: MatchRepo) -> None:
        self._repo = match_repo

    # -------------------------
    # Public API
    # -------------------------

    async def create_bracket(self, *, tournament_id: int, players: Sequence[Player]) -> list[Match]:
        """
        Build every round for the given players (seeded by seed_position),
        resolve byes and store the result. Refuses if matches already exist.
        """
        existing = await self._repo.list_matches(tournament_id=tournament_id)
        if existing:
            raise BracketAlreadyExistsError(f"Matches already exist for tournament {tournament_id}.")

        ordered = sorted(players, key=lambda p: (p.seed_position, p.player_id))
        skeleton = builder.create_bracket([p.player_id for p in ordered])

        ids = await self._repo.create_matches(tournament_id=tournament_id, matches=skeleton)
        matches = [
            replace(m, match_id=match_id, tournament_id=tournament_id)
            for m, match_id in zip(skeleton, ids)
        ]

        byes = sum(1 for m in matches if m.is_bye)
        logger.info(
            "Bracket created for tournament %s: %s players, %s matches, %s byes",
            tournament_id,
            len(ordered),
            len(matches),
            byes,
        )
        return matches

    async def get_matches(self, *, tournament_id: int, round_no: int | None = None) -> list[Match]:
        rows = await self._repo.list_matches(tournament_id=tournament_id, round_no=round_no)
        return [match_from_row(r) for r in rows]

    async def record_winner(self, *, match_id: int, winner_id: int) -> AdvanceResult:
        """
        Record a result for one ready match and advance the bracket.
        Engine errors (invalid winner, slot conflict, not ready) propagate as-is
        and nothing is written.
        """
        row = await self._repo.get_match(match_id=match_id)
        if not row:
            raise MatchNotFoundError(f"Match not found: {match_id}")
        tournament_id = int(row["tournament_id"])

        matches = await self.get_matches(tournament_id=tournament_id)
        result = record_winner(matches, match_id, winner_id)

        read = {m.match_id: m for m in matches}
        try:
            await self._repo.apply_updates(
                updates=result.updates,
                before={m.match_id: read[m.match_id] for m in result.updates},
            )
        except StaleMatchError as e:
            logger.warning("Tournament %s: result for match %s not saved: %s", tournament_id, match_id, e)
            raise BracketStateError(str(e)) from e

        reported = result.updates[0]
        logger.info("Tournament %s: %s won by player %s", tournament_id, reported.code, winner_id)
        for m in result.updates[1:]:
            if m.is_bye:
                logger.info("Tournament %s: %s is a bye for player %s", tournament_id, m.code, m.winner_id)
        if result.champion_id is not None:
            logger.info("Tournament %s: champion is player %s", tournament_id, result.champion_id)

        return result

    async def verify(self, *, tournament_id: int) -> list[IntegrityViolation]:
        matches = await self.get_matches(tournament_id=tournament_id)
        violations = verify_bracket(matches)
        for v in violations:
            logger.warning("Tournament %s integrity: %s", tournament_id, v)
        return violations

    async def get_champion(self, *, tournament_id: int) -> Optional[int]:
        matches = await self.get_matches(tournament_id=tournament_id)
        return champion_of(matches)
