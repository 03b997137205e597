"""Game domain services: rooms, sessions and per-variant rules.

This package contains pure(ish) domain logic that should be imported by
socket handlers and HTTP routes, keeping transport concerns separated
from core game mechanics.
"""

from .match_board import MatchBoard
from .speed_duel import SpeedDuel
from .turn_board import TurnBoard


def build_variants(rng=None, win_score=10):
    """Return the supported rule-sets keyed by their wire game type."""
    variants = [TurnBoard(rng), MatchBoard(rng), SpeedDuel(rng, win_score=win_score)]
    return {v.game_type: v for v in variants}
