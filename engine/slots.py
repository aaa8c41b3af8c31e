# engine/slots.py
"""
The one place where players are put into match slots.

Both bye propagation at build time and live winner advancement go through
seat_player(), so the "first open slot" and "lone player sits in player1"
rules cannot drift apart.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Optional

from domain.enums import Slot
from domain.models import Match
from engine.errors import SlotConflictError


def open_slot(match: Match) -> Optional[Slot]:
    if match.player1_id is None:
        return Slot.PLAYER1
    if match.player2_id is None:
        return Slot.PLAYER2
    return None


def normalize(match: Match) -> Match:
    if match.player1_id is None and match.player2_id is not None:
        return replace(match, player1_id=match.player2_id, player2_id=None)
    return match


def fill_slot(match: Match, player_id: int) -> Match:
    """
    Put player_id into player1 if empty, else player2.

    Filling with a player who is already seated is a no-op.
    Raises SlotConflictError when the match is decided or both slots hold other players.
    """
    match = normalize(match)
    if player_id in match.participants:
        return match

    if match.is_bye or match.winner_id is not None:
        raise SlotConflictError(f"{match.code} is already decided; cannot seat player {player_id}.")

    slot = open_slot(match)
    if slot is None:
        raise SlotConflictError(
            f"{match.code} already has both players "
            f"({match.player1_id} vs {match.player2_id}); cannot seat player {player_id}."
        )
    if slot is Slot.PLAYER1:
        return replace(match, player1_id=player_id)
    return replace(match, player2_id=player_id)


def settle(match: Match, *, sealed: bool) -> tuple[Match, bool]:
    """
    Re-evaluate bye eligibility.

    sealed=True means no feeder can ever supply another player; a sealed match
    holding exactly one player becomes a bye won by that player.
    Returns (match, became_bye).
    """
    match = normalize(match)
    if match.is_bye or match.winner_id is not None:
        return match, False
    if sealed and match.player_count == 1:
        return replace(match, is_bye=True, winner_id=match.player1_id), True
    return match, False


def seat_player(
    match: Match,
    player_id: int,
    *,
    is_sealed: Callable[[Match], bool],
) -> tuple[Match, bool]:
    """
    fill_slot() followed by settle(). is_sealed is asked about the filled match.
    Returns (updated match, became_bye).
    """
    filled = fill_slot(match, player_id)
    return settle(filled, sealed=is_sealed(filled))
