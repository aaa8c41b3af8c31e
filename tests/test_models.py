"""
Unit tests for bracket arithmetic and the Match model.
"""
import pytest

from domain.enums import MatchStatus
from domain.models import (
    Match,
    feeder_match_numbers,
    match_code,
    matches_in_round,
    next_match_position,
    next_power_of_two,
    round_count,
    round_title,
)


class TestBracketArithmetic:
    """Tests for the pure sizing helpers."""

    @pytest.mark.parametrize("n,expected", [(1, 1), (2, 2), (3, 4), (5, 8), (8, 8), (9, 16), (33, 64)])
    def test_next_power_of_two(self, n, expected):
        assert next_power_of_two(n) == expected

    @pytest.mark.parametrize("n,expected", [(2, 1), (3, 2), (4, 2), (5, 3), (8, 3), (9, 4), (16, 4), (17, 5)])
    def test_round_count(self, n, expected):
        assert round_count(n) == expected

    def test_matches_in_round_halves(self):
        """Each round has half the matches of the one before; the final has one."""
        assert [matches_in_round(3, r) for r in (1, 2, 3)] == [4, 2, 1]

    def test_next_match_position(self):
        assert next_match_position(1, 1) == (2, 1)
        assert next_match_position(1, 2) == (2, 1)
        assert next_match_position(1, 3) == (2, 2)
        assert next_match_position(2, 4) == (3, 2)

    def test_feeders_are_inverse_of_next_position(self):
        for match_no in range(1, 9):
            for feeder in feeder_match_numbers(match_no):
                assert next_match_position(1, feeder) == (2, match_no)

    def test_round_titles(self):
        assert round_title(4, 4) == "Final"
        assert round_title(3, 4) == "Semifinal"
        assert round_title(2, 4) == "Quarterfinal"
        assert round_title(1, 4) == "Round 1"

    def test_match_code(self):
        assert match_code(2, 3) == "R2-M03"


class TestMatch:
    """Tests for derived Match properties."""

    def test_empty_match_is_waiting(self):
        m = Match(round_no=2, match_no=1)
        assert m.status is MatchStatus.WAITING
        assert m.participants == ()
        assert not m.is_ready

    def test_two_players_is_ready(self):
        m = Match(round_no=1, match_no=1, player1_id=1, player2_id=2)
        assert m.status is MatchStatus.READY
        assert m.is_ready

    def test_winner_means_completed(self):
        m = Match(round_no=1, match_no=1, player1_id=1, player2_id=2, winner_id=2)
        assert m.status is MatchStatus.COMPLETED
        assert not m.is_ready

    def test_bye_with_winner_reports_completed(self):
        m = Match(round_no=1, match_no=3, player1_id=5, winner_id=5, is_bye=True)
        assert m.status is MatchStatus.COMPLETED
        assert m.participants == (5,)

    def test_bye_flag_without_winner_reports_bye(self):
        m = Match(round_no=1, match_no=3, player1_id=5, is_bye=True)
        assert m.status is MatchStatus.BYE

    def test_match_is_immutable(self):
        m = Match(round_no=1, match_no=1)
        with pytest.raises(AttributeError):
            m.winner_id = 3
