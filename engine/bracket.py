# engine/bracket.py
from __future__ import annotations

from typing import Iterable, Optional

from domain.models import Match, feeder_match_numbers, next_match_position
from engine.errors import MatchNotFoundError, ValidationError


class Bracket:
    """
    Indexed working copy of one tournament's matches.

    Matches are frozen dataclasses, so the caller's collection is never touched;
    put() swaps in new values and remembers them as changes.
    """

    def __init__(self, matches: Iterable[Match]) -> None:
        self._by_pos: dict[tuple[int, int], Match] = {}
        for m in matches:
            if m.position in self._by_pos:
                raise ValidationError(f"Duplicate match position {m.code}.")
            self._by_pos[m.position] = m

        if not self._by_pos:
            raise ValidationError("Bracket has no matches.")

        self.num_rounds = max(r for (r, _m) in self._by_pos)
        self._changed: dict[tuple[int, int], Match] = {}

    # -------------------------
    # Lookups
    # -------------------------

    def get(self, round_no: int, match_no: int) -> Optional[Match]:
        return self._by_pos.get((round_no, match_no))

    def by_id(self, match_id: int) -> Match:
        for m in self._by_pos.values():
            if m.match_id is not None and m.match_id == match_id:
                return m
        raise MatchNotFoundError(f"Match not found: {match_id}")

    def matches(self) -> list[Match]:
        return [self._by_pos[pos] for pos in sorted(self._by_pos)]

    def round(self, round_no: int) -> list[Match]:
        return [m for m in self.matches() if m.round_no == round_no]

    @property
    def final(self) -> Optional[Match]:
        return self.get(self.num_rounds, 1)

    @property
    def champion_id(self) -> Optional[int]:
        final = self.final
        return final.winner_id if final else None

    def target_of(self, match: Match) -> Optional[Match]:
        if match.round_no >= self.num_rounds:
            return None
        return self.get(*next_match_position(match.round_no, match.match_no))

    def feeders_of(self, match: Match) -> list[Match]:
        if match.round_no <= 1:
            return []
        out: list[Match] = []
        for no in feeder_match_numbers(match.match_no):
            m = self.get(match.round_no - 1, no)
            if m is not None:
                out.append(m)
        return out

    # -------------------------
    # Feeder state
    # -------------------------

    def is_void(self, match: Match) -> bool:
        """
        True when the match can never receive a player: an empty round-1 match,
        or a later match fed only by void matches.
        """
        if match.participants or match.winner_id is not None:
            return False
        if match.round_no == 1:
            return True
        return all(self.is_void(f) for f in self.feeders_of(match))

    def is_decided(self, match: Match) -> bool:
        return match.winner_id is not None or self.is_void(match)

    def is_sealed(self, match: Match) -> bool:
        """
        True when no feeder can supply another player to this match: every
        feeder is void or its winner is already seated here.
        Round-1 matches are filled directly, so they are always sealed.
        """
        seated = match.participants
        for f in self.feeders_of(match):
            if self.is_void(f):
                continue
            if f.winner_id is None or f.winner_id not in seated:
                return False
        return True

    def missing_winners(self, match: Match) -> list[Match]:
        """Decided feeders whose winner is not seated in this match."""
        seated = match.participants
        return [f for f in self.feeders_of(match) if f.winner_id is not None and f.winner_id not in seated]

    # -------------------------
    # Changes
    # -------------------------

    def put(self, match: Match) -> None:
        if self._by_pos.get(match.position) == match:
            return
        self._by_pos[match.position] = match
        self._changed[match.position] = match

    def changes(self) -> list[Match]:
        return list(self._changed.values())
