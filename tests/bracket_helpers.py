"""
Helpers shared by the engine tests.
"""
from dataclasses import replace
from typing import Callable, Optional

from domain.models import Match
from engine.advancer import record_winner
from engine.builder import create_bracket


def with_ids(matches):
    """Give every match an id (1..n in bracket order), as the store would."""
    return [replace(m, match_id=i, tournament_id=1) for i, m in enumerate(matches, start=1)]


def new_bracket(player_count: int, first_id: int = 1):
    return with_ids(create_bracket(list(range(first_id, first_id + player_count))))


def at(matches, round_no: int, match_no: int) -> Match:
    return next(m for m in matches if m.round_no == round_no and m.match_no == match_no)


def in_round(matches, round_no: int):
    return [m for m in matches if m.round_no == round_no]


def play_out(
    matches,
    pick: Optional[Callable[[Match], int]] = None,
    after_each: Optional[Callable[[list], None]] = None,
):
    """
    Report every ready match (lowest position first) until none is left.
    Returns (final matches, champion_id).
    """
    pick = pick or (lambda m: m.player1_id)
    champion = None
    while True:
        ready = [m for m in matches if m.is_ready]
        if not ready:
            return matches, champion
        result = record_winner(matches, ready[0].match_id, pick(ready[0]))
        matches = result.matches
        champion = result.champion_id
        if after_each:
            after_each(matches)
