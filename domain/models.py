# domain/models.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from domain.enums import MatchStatus


def match_code(round_no: int, match_no: int) -> str:
    return f"R{round_no}-M{match_no:02d}"


def next_power_of_two(n: int) -> int:
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p


def round_count(player_count: int) -> int:
    """
    Number of rounds needed for player_count entrants.
    Example: 5 players => 8 slots => 3 rounds
    """
    return next_power_of_two(player_count).bit_length() - 1


def matches_in_round(num_rounds: int, round_no: int) -> int:
    return 2 ** (num_rounds - round_no)


def next_match_position(round_no: int, match_no: int) -> tuple[int, int]:
    return round_no + 1, (match_no - 1) // 2 + 1


def feeder_match_numbers(match_no: int) -> tuple[int, int]:
    return 2 * match_no - 1, 2 * match_no


def round_title(round_no: int, total_rounds: int) -> str:
    if round_no == total_rounds:
        return "Final"
    if round_no == total_rounds - 1:
        return "Semifinal"
    if round_no == total_rounds - 2:
        return "Quarterfinal"
    return f"Round {round_no}"


@dataclass(frozen=True)
class Tournament:
    tournament_id: int
    name: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Player:
    player_id: int
    name: str
    seed_position: int
    tournament_id: Optional[int] = None


@dataclass(frozen=True)
class Match:
    round_no: int
    match_no: int

    player1_id: Optional[int] = None
    player2_id: Optional[int] = None
    winner_id: Optional[int] = None
    is_bye: bool = False

    # None until the store has assigned one (a bracket skeleton)
    match_id: Optional[int] = None
    tournament_id: Optional[int] = None

    @property
    def position(self) -> tuple[int, int]:
        return self.round_no, self.match_no

    @property
    def code(self) -> str:
        return match_code(self.round_no, self.match_no)

    @property
    def participants(self) -> tuple[int, ...]:
        return tuple(p for p in (self.player1_id, self.player2_id) if p is not None)

    @property
    def player_count(self) -> int:
        return len(self.participants)

    @property
    def is_ready(self) -> bool:
        return (
            self.player1_id is not None
            and self.player2_id is not None
            and self.winner_id is None
            and not self.is_bye
        )

    @property
    def status(self) -> MatchStatus:
        if self.winner_id is not None:
            return MatchStatus.COMPLETED
        if self.is_bye:
            return MatchStatus.BYE
        if self.player1_id is not None and self.player2_id is not None:
            return MatchStatus.READY
        return MatchStatus.WAITING
