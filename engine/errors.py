# engine/errors.py
from __future__ import annotations


class BracketError(Exception):
    pass


class ValidationError(BracketError):
    """Input rejected before any bracket is built (e.g. fewer than two players)."""


class InvalidWinnerError(BracketError):
    pass


class SlotConflictError(BracketError):
    """
    A next-round match cannot take the advancing player.
    Signals an earlier integrity problem or an unguarded concurrent writer.
    """


class MatchNotFoundError(BracketError):
    pass


class MatchNotReadyError(BracketError):
    pass
