# engine/advancer.py
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional, Sequence

from domain.models import Match
from engine.bracket import Bracket
from engine.errors import InvalidWinnerError, MatchNotReadyError, SlotConflictError
from engine.slots import seat_player

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvanceResult:
    matches: list[Match]          # full bracket after the result was applied
    updates: list[Match]          # changed matches, reported match first
    champion_id: Optional[int] = None


def record_winner(matches: Sequence[Match], match_id: int, winner_id: int) -> AdvanceResult:
    """
    Record the winner of one ready match and carry them forward.

    The winner is seated in the next-round match; if that leaves the next match
    as a bye (its other feeder can never produce a player) the bye winner moves
    on as well, as far as it goes.

    Everything is computed on a copy. Any error is raised before a result
    exists, so callers never see a half-applied advancement.
    """
    bracket = Bracket(matches)
    match = bracket.by_id(match_id)

    if match.is_bye:
        raise MatchNotReadyError(f"{match.code} is a bye and cannot be reported.")
    if match.winner_id is not None:
        raise MatchNotReadyError(f"{match.code} already has a winner ({match.winner_id}).")
    if match.player1_id is None or match.player2_id is None:
        raise MatchNotReadyError(f"{match.code} is still waiting for a player.")

    if winner_id not in (match.player1_id, match.player2_id):
        raise InvalidWinnerError(
            f"Winner {winner_id} must be {match.player1_id} or {match.player2_id} for {match.code}."
        )

    decided = replace(match, winner_id=winner_id)
    bracket.put(decided)
    _carry_forward(bracket, decided)

    return AdvanceResult(
        matches=bracket.matches(),
        updates=bracket.changes(),
        champion_id=bracket.champion_id,
    )


def _carry_forward(bracket: Bracket, source: Match) -> None:
    while True:
        target = bracket.target_of(source)
        if target is None:
            # final decided
            return

        seated, became_bye = seat_player(target, source.winner_id, is_sealed=bracket.is_sealed)

        if seated.player_count == 1 and not became_bye:
            missing = bracket.missing_winners(seated)
            if missing:
                codes = ", ".join(m.code for m in missing)
                raise SlotConflictError(
                    f"{seated.code} holds only player {seated.player1_id} although {codes} "
                    f"already decided; the bracket is inconsistent."
                )

        bracket.put(seated)
        if not became_bye:
            return

        logger.debug("%s became a bye for player %s", seated.code, seated.winner_id)
        source = seated
