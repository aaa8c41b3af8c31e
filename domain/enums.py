# domain/enums.py
from __future__ import annotations

from enum import Enum


class Slot(str, Enum):
    PLAYER1 = "player1"
    PLAYER2 = "player2"


class MatchStatus(str, Enum):
    COMPLETED = "completed"  # winner recorded (byes included)
    BYE = "bye"
    READY = "ready"          # both players seated, waiting for a result
    WAITING = "waiting"      # at least one feeder still open
