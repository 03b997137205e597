"""Shared contract for the per-variant game rules."""

import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .errors import ValidationError

P1 = 'p1'
P2 = 'p2'
SLOTS = (P1, P2)
DRAW = 'Draw'


def other_slot(slot: str) -> str:
    return P2 if slot == P1 else P1


@dataclass(frozen=True)
class Outcome:
    kind: str = 'continue'  # continue, win, draw
    winner: Optional[str] = None

    @classmethod
    def win(cls, slot: str) -> 'Outcome':
        return cls('win', slot)

    @classmethod
    def draw(cls) -> 'Outcome':
        return cls('draw')

    @property
    def terminal(self) -> bool:
        return self.kind != 'continue'


Outcome.CONTINUE = Outcome()


@dataclass
class MoveResult:
    events: List[Tuple[str, Any]] = field(default_factory=list)
    outcome: Outcome = Outcome.CONTINUE
    # Slot that acts next; None leaves the room's turn untouched
    next_turn: Optional[str] = None
    # A revealed pair is waiting for a delayed resolve_pending()
    pending: bool = False


def parse_index(move: Dict[str, Any], size: int) -> int:
    """Pull a board index out of a move payload, rejecting anything off-board."""
    raw = (move or {}).get('index')
    if isinstance(raw, bool):
        raise ValidationError('index must be an integer')
    if isinstance(raw, str) and raw.strip().isdecimal():
        raw = int(raw.strip())
    if not isinstance(raw, int):
        raise ValidationError('index must be an integer')
    if not 0 <= raw < size:
        raise ValidationError(f'index {raw} is off the board')
    return raw


class GameVariant:
    """One rule-set. Subclasses keep no per-room data: all of it lives in the state."""

    game_type: str = ''
    move_event: str = ''
    turn_based = True

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def init(self):
        raise NotImplementedError

    def apply_move(self, state, slot: str, move: Dict[str, Any]) -> MoveResult:
        raise NotImplementedError

    def snapshot(self, state) -> Dict[str, Any]:
        raise NotImplementedError

    def restart_payload(self, state) -> Dict[str, Any]:
        return self.snapshot(state)

    def terminal_event(self, state, outcome: Outcome) -> Tuple[str, Any]:
        return 'gameOver', outcome.winner if outcome.kind == 'win' else DRAW

    def symbol(self, slot: str) -> str:
        return slot

    def resolve_pending(self, state) -> None:
        pass
