# engine/verifier.py
"""
Read-only integrity checks over one tournament's matches.

Findings are returned as data; nothing here raises for a broken bracket or
changes a match. Run it after building, after any advancement, or in tests.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Sequence

from domain.models import Match, matches_in_round, match_code
from engine.bracket import Bracket


@dataclass(frozen=True, order=True)
class IntegrityViolation:
    round_no: int
    match_no: int
    description: str

    def __str__(self) -> str:
        return f"{match_code(self.round_no, self.match_no)}: {self.description}"


def verify_bracket(matches: Sequence[Match]) -> list[IntegrityViolation]:
    if not matches:
        return [IntegrityViolation(0, 0, "bracket has no matches")]

    # Bracket() refuses duplicate positions
    dupes = [pos for pos, n in Counter(m.position for m in matches).items() if n > 1]
    if dupes:
        return sorted(IntegrityViolation(r, no, "duplicate match position") for (r, no) in dupes)

    bracket = Bracket(matches)
    out: list[IntegrityViolation] = []
    out.extend(_check_structure(bracket))
    for m in bracket.matches():
        out.extend(_check_match(bracket, m))
    out.extend(_check_rounds_unique(bracket))
    return sorted(set(out))


def _check_structure(bracket: Bracket) -> list[IntegrityViolation]:
    out: list[IntegrityViolation] = []
    n = bracket.num_rounds

    finals = bracket.round(n)
    if len(finals) != 1:
        out.append(IntegrityViolation(n, 1, f"final round has {len(finals)} matches, expected 1"))

    total_slots = 2 ** n
    total = len(bracket.matches())
    if total != total_slots - 1:
        out.append(IntegrityViolation(0, 0, f"bracket has {total} matches, expected {total_slots - 1}"))

    for round_no in range(1, n + 1):
        expected = matches_in_round(n, round_no)
        numbers = sorted(m.match_no for m in bracket.round(round_no))
        if numbers != list(range(1, expected + 1)):
            out.append(
                IntegrityViolation(
                    round_no, 0, f"round numbered {numbers}, expected 1..{expected}"
                )
            )
    return out


def _check_match(bracket: Bracket, m: Match) -> list[IntegrityViolation]:
    out: list[IntegrityViolation] = []

    def bad(msg: str) -> None:
        out.append(IntegrityViolation(m.round_no, m.match_no, msg))

    if m.player1_id is not None and m.player1_id == m.player2_id:
        bad(f"player {m.player1_id} occupies both slots")

    if m.is_bye:
        if m.winner_id is None:
            bad("bye has no winner")
        if m.player_count != 1:
            bad(f"bye has {m.player_count} players, expected 1")
        elif m.winner_id is not None and m.winner_id != m.participants[0]:
            bad(f"bye winner {m.winner_id} is not its only player")

    if m.winner_id is not None:
        if m.winner_id not in m.participants:
            bad(f"winner {m.winner_id} is not a participant")
        elif not m.is_bye and m.player_count != 2:
            bad("winner recorded before both players were seated")

        target = bracket.target_of(m)
        if m.round_no < bracket.num_rounds:
            if target is None:
                bad("next-round match is missing")
            elif m.winner_id not in target.participants:
                bad(f"winner {m.winner_id} has not reached {target.code}")
    elif (
        m.round_no > 1
        and m.player_count == 1
        and not m.is_bye
        and all(bracket.is_decided(f) for f in bracket.feeders_of(m))
    ):
        bad("one player seated, every feeder decided, but not marked as a bye")

    return out


def _check_rounds_unique(bracket: Bracket) -> list[IntegrityViolation]:
    out: list[IntegrityViolation] = []
    for round_no in range(1, bracket.num_rounds + 1):
        seen: dict[int, Match] = {}
        for m in bracket.round(round_no):
            for p in set(m.participants):
                first = seen.get(p)
                if first is not None:
                    out.append(
                        IntegrityViolation(
                            m.round_no, m.match_no, f"player {p} also seated in {first.code}"
                        )
                    )
                else:
                    seen[p] = m
    return out
