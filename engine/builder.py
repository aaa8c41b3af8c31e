# engine/builder.py
"""
Bracket construction: the round/match skeleton, round-1 seating and bye
propagation.

Players are seated in the order given (naive sequential seeding). Shuffling, if
any, is the caller's business.
"""
from __future__ import annotations

import logging
from dataclasses import replace
from typing import Sequence

from domain.models import Match, matches_in_round, round_count
from engine.bracket import Bracket
from engine.errors import ValidationError
from engine.slots import seat_player

logger = logging.getLogger(__name__)


def build_bracket(player_ids: Sequence[int]) -> list[Match]:
    """
    Create every match of every round, then seat players two per round-1 match.

    A round-1 match that receives a single player is a bye won by that player.
    Round-1 matches past the last player stay empty.
    Returns matches ordered by (round_no, match_no).
    """
    ids = list(player_ids)
    if len(ids) < 2:
        raise ValidationError(f"At least 2 players are required (got {len(ids)}).")
    if len(set(ids)) != len(ids):
        raise ValidationError("Player ids must be unique.")

    num_rounds = round_count(len(ids))

    rounds: dict[int, list[Match]] = {}
    for round_no in range(1, num_rounds + 1):
        rounds[round_no] = [
            Match(round_no=round_no, match_no=match_no)
            for match_no in range(1, matches_in_round(num_rounds, round_no) + 1)
        ]

    first = rounds[1]
    i = 0
    for idx, m in enumerate(first):
        p1 = ids[i] if i < len(ids) else None
        p2 = ids[i + 1] if i + 1 < len(ids) else None
        i += 2

        if p1 is None:
            break
        if p2 is None:
            first[idx] = replace(m, player1_id=p1, is_bye=True, winner_id=p1)
        else:
            first[idx] = replace(m, player1_id=p1, player2_id=p2)

    out: list[Match] = []
    for round_no in sorted(rounds):
        out.extend(rounds[round_no])
    return out


def propagate_byes(matches: Sequence[Match]) -> list[Match]:
    """
    Push every bye winner into its next-round match, round by round.

    A target that ends up with one player and no feeder left to supply a second
    becomes a bye itself and is carried on the next pass. Safe to run again on
    its own output.
    """
    bracket = Bracket(matches)

    for round_no in range(1, bracket.num_rounds):
        for m in bracket.round(round_no):
            if not m.is_bye or m.winner_id is None:
                continue

            target = bracket.target_of(m)
            if target is None:
                continue

            seated, became_bye = seat_player(target, m.winner_id, is_sealed=bracket.is_sealed)
            bracket.put(seated)
            if became_bye:
                logger.debug("Bye cascades %s -> %s (player %s)", m.code, seated.code, seated.winner_id)

    return bracket.matches()


def create_bracket(player_ids: Sequence[int]) -> list[Match]:
    return propagate_byes(build_bracket(player_ids))
