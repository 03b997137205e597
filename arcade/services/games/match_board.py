"""Memory match: flip two cards per turn, keep the turn on a pair."""

from dataclasses import dataclass, field
from typing import Dict, List

from .base import GameVariant, MoveResult, Outcome, P1, P2, parse_index
from .errors import ValidationError

ICONS = ['🍎', '🍌', '🍇', '🍉', '🍒', '🍓', '🥝', '🍍']
BOARD_SIZE = len(ICONS) * 2


@dataclass
class MatchBoardState:
    board: List[str]
    matched: List[int] = field(default_factory=list)
    flipped: List[int] = field(default_factory=list)
    scores: Dict[str, int] = field(default_factory=lambda: {P1: 0, P2: 0})


class MatchBoard(GameVariant):
    game_type = 'memory'
    move_event = 'makeMoveMemory'

    def init(self):
        cards = ICONS * 2
        self.rng.shuffle(cards)
        return MatchBoardState(board=cards)

    def apply_move(self, state, slot, move):
        index = parse_index(move, BOARD_SIZE)
        if index in state.matched or index in state.flipped:
            raise ValidationError(f'card {index} is already face up')
        if len(state.flipped) >= 2:
            raise ValidationError('previous pair is still being resolved')

        state.flipped.append(index)
        result = MoveResult(events=[('memoryFlip', {'index': index, 'value': state.board[index]})])
        if len(state.flipped) < 2:
            return result

        first, second = state.flipped
        if state.board[first] != state.board[second]:
            # Pair stays visible until resolve_pending() runs after the settle delay
            result.pending = True
            return result

        state.matched.extend([first, second])
        state.scores[slot] += 1
        state.flipped = []
        result.events.append(('memoryMatch', {
            'matches': [first, second],
            'scores': dict(state.scores),
            'turn': slot,
        }))
        if len(state.matched) == BOARD_SIZE:
            result.outcome = self._final_outcome(state)
        return result

    def resolve_pending(self, state):
        state.flipped = []

    def snapshot(self, state):
        matched = set(state.matched)
        return {
            'scores': dict(state.scores),
            'matched': list(state.matched),
            'revealed': [i in matched for i in range(BOARD_SIZE)],
        }

    @staticmethod
    def _final_outcome(state):
        p1, p2 = state.scores[P1], state.scores[P2]
        if p1 == p2:
            return Outcome.draw()
        return Outcome.win(P1 if p1 > p2 else P2)
