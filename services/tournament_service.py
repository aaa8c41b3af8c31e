# services/tournament_service.py
from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional

from domain.models import Match, Player, Tournament
from engine.errors import ValidationError
from repositories.player_repo import PlayerRepo
from repositories.tournament_repo import TournamentRepo
from services.bracket_service import BracketService, RoundProgress, champion_of, round_progress

logger = logging.getLogger(__name__)


class TournamentServiceError(Exception):
    pass


class TournamentNotFoundError(TournamentServiceError):
    pass


@dataclass(frozen=True)
class TournamentData:
    tournament: Tournament
    players: list[Player]
    matches: list[Match]
    rounds: list[RoundProgress]
    champion: Optional[Player] = None

    @property
    def completed_matches(self) -> int:
        return sum(1 for m in self.matches if m.winner_id is not None)

    @property
    def total_matches(self) -> int:
        return len(self.matches)

    def player(self, player_id: Optional[int]) -> Optional[Player]:
        if player_id is None:
            return None
        return next((p for p in self.players if p.player_id == player_id), None)


def parse_player_names(text: str) -> list[str]:
    """One name per line; surrounding whitespace and blank lines are dropped."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


def tournament_from_row(r: Mapping[str, Any]) -> Tournament:
    return Tournament(
        tournament_id=int(r["tournament_id"]),
        name=str(r["name"]),
        created_at=r.get("created_at"),
    )


def player_from_row(r: Mapping[str, Any]) -> Player:
    return Player(
        player_id=int(r["player_id"]),
        name=str(r["name"]),
        seed_position=int(r["seed_position"]),
        tournament_id=int(r["tournament_id"]) if r.get("tournament_id") is not None else None,
    )


class TournamentService:
    """
    Tournament lifecycle: create (players + bracket), read, list, delete.
    Bracket rules live in the engine; this service only sequences the writes.
    """

    def __init__(
        self,
        tournament_repo: TournamentRepo,
        player_repo: PlayerRepo,
        bracket_service: BracketService,
        *,
        randomize_default: bool = False,
    ) -> None:
        self._tournaments = tournament_repo
        self._players = player_repo
        self._brackets = bracket_service
        self._randomize_default = randomize_default

    # -------------------------
    # Creation
    # -------------------------

    async def create_tournament(
        self,
        *,
        name: str,
        player_names: Iterable[str],
        randomize: bool | None = None,
        rng_seed: int | None = None,
    ) -> int:
        """
        Creates the tournament, its players (seed_position = order after the
        optional shuffle, starting at 1) and the full bracket.
        Returns the new tournament_id.
        """
        name = (name or "").strip()
        if not name:
            raise TournamentServiceError("Tournament name is required.")

        names = [n.strip() for n in player_names if n and n.strip()]
        if len(names) < 2:
            raise ValidationError(f"At least 2 players are required (got {len(names)}).")

        if self._randomize_default if randomize is None else randomize:
            random.Random(rng_seed).shuffle(names)

        tournament_id = await self._tournaments.create_tournament(name=name)
        try:
            ids = await self._players.create_players(
                tournament_id=tournament_id,
                players=[(n, seed) for seed, n in enumerate(names, start=1)],
            )
            players = [
                Player(player_id=pid, name=n, seed_position=seed, tournament_id=tournament_id)
                for seed, (pid, n) in enumerate(zip(ids, names), start=1)
            ]
            await self._brackets.create_bracket(tournament_id=tournament_id, players=players)
        except Exception:
            logger.exception("Tournament %s setup failed; removing it", tournament_id)
            await self._discard(tournament_id)
            raise

        logger.info("Tournament %s created: %r with %s players", tournament_id, name, len(names))
        return tournament_id

    async def create_tournament_from_text(
        self,
        *,
        name: str,
        player_list: str,
        randomize: bool | None = None,
        rng_seed: int | None = None,
    ) -> int:
        return await self.create_tournament(
            name=name,
            player_names=parse_player_names(player_list),
            randomize=randomize,
            rng_seed=rng_seed,
        )

    async def _discard(self, tournament_id: int) -> None:
        # cleanup failures are logged only; the setup error propagates
        try:
            await self._tournaments.delete_tournament(tournament_id=tournament_id)
        except Exception:
            logger.exception("Could not remove half-created tournament %s", tournament_id)

    # -------------------------
    # Reads
    # -------------------------

    async def get_tournament(self, *, tournament_id: int) -> Tournament:
        row = await self._tournaments.get_tournament(tournament_id=tournament_id)
        if not row:
            raise TournamentNotFoundError(f"Tournament not found: {tournament_id}")
        return tournament_from_row(row)

    async def list_tournaments(self) -> list[Tournament]:
        rows = await self._tournaments.list_tournaments()
        return [tournament_from_row(r) for r in rows]

    async def get_players(self, *, tournament_id: int) -> list[Player]:
        rows = await self._players.list_players(tournament_id=tournament_id)
        return [player_from_row(r) for r in rows]

    async def get_tournament_data(self, *, tournament_id: int) -> TournamentData:
        tournament = await self.get_tournament(tournament_id=tournament_id)
        players = await self.get_players(tournament_id=tournament_id)
        matches = await self._brackets.get_matches(tournament_id=tournament_id)

        champion_id = champion_of(matches)
        return TournamentData(
            tournament=tournament,
            players=players,
            matches=matches,
            rounds=round_progress(matches),
            champion=next((p for p in players if p.player_id == champion_id), None),
        )

    # -------------------------
    # Teardown
    # -------------------------

    async def delete_tournament(self, *, tournament_id: int) -> None:
        deleted = await self._tournaments.delete_tournament(tournament_id=tournament_id)
        if deleted == 0:
            raise TournamentNotFoundError(f"Tournament not found: {tournament_id}")
        logger.info("Tournament %s deleted", tournament_id)
