from dataclasses import dataclass, field
from typing import List

from .base import DRAW, GameVariant, MoveResult, Outcome, P1, P2, other_slot, parse_index
from .errors import ValidationError

SYMBOLS = {P1: 'X', P2: 'O'}
WIN_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),
    (0, 3, 6), (1, 4, 7), (2, 5, 8),
    (0, 4, 8), (2, 4, 6),
)


@dataclass
class TurnBoardState:
    board: List[str] = field(default_factory=lambda: [''] * 9)


def find_winner(board):
    """Return the symbol owning a complete line, 'Draw' on a full board, else None."""
    for a, b, c in WIN_LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    return None if '' in board else DRAW


class TurnBoard(GameVariant):
    game_type = 'tictactoe'
    move_event = 'makeMove'

    def init(self):
        return TurnBoardState()

    def symbol(self, slot):
        return SYMBOLS[slot]

    def apply_move(self, state, slot, move):
        index = parse_index(move, 9)
        if state.board[index]:
            raise ValidationError(f'cell {index} is already taken')

        state.board[index] = SYMBOLS[slot]
        following = other_slot(slot)
        result = MoveResult(
            events=[('updateGame', {'board': list(state.board), 'turn': SYMBOLS[following]})],
        )
        winner = find_winner(state.board)
        if winner == DRAW:
            result.outcome = Outcome.draw()
        elif winner:
            result.outcome = Outcome.win(slot)
        else:
            result.next_turn = following
        return result

    def snapshot(self, state):
        return {'board': list(state.board)}

    def terminal_event(self, state, outcome):
        if outcome.kind == 'win':
            return 'gameOver', SYMBOLS[outcome.winner]
        return 'gameOver', DRAW
