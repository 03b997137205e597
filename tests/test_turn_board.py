import itertools
import random

import pytest

from arcade.services.games.errors import ValidationError
from arcade.services.games.turn_board import TurnBoard, find_winner, WIN_LINES


def _play(variant, state, moves):
    results = []
    slots = itertools.cycle(['p1', 'p2'])
    for index in moves:
        results.append(variant.apply_move(state, next(slots), {'index': index}))
    return results


def test_init_is_empty_board():
    state = TurnBoard().init()
    assert state.board == [''] * 9


def test_mark_cell_and_pass_turn():
    variant = TurnBoard()
    state = variant.init()
    result = variant.apply_move(state, 'p1', {'index': 4})
    assert state.board[4] == 'X'
    assert result.next_turn == 'p2'
    assert not result.outcome.terminal
    assert result.events == [('updateGame', {'board': state.board, 'turn': 'O'})]


def test_occupied_cell_is_rejected_without_change():
    variant = TurnBoard()
    state = variant.init()
    variant.apply_move(state, 'p1', {'index': 0})
    with pytest.raises(ValidationError):
        variant.apply_move(state, 'p2', {'index': 0})
    assert state.board[0] == 'X'
    assert state.board.count('') == 8


@pytest.mark.parametrize('index', [-1, 9, 'a', None, True, 1.5])
def test_off_board_or_malformed_index_is_rejected(index):
    variant = TurnBoard()
    state = variant.init()
    with pytest.raises(ValidationError):
        variant.apply_move(state, 'p1', {'index': index})
    assert state.board == [''] * 9


def test_digit_string_index_is_accepted():
    variant = TurnBoard()
    state = variant.init()
    variant.apply_move(state, 'p1', {'index': '7'})
    assert state.board[7] == 'X'


def test_top_row_wins_for_p1():
    variant = TurnBoard()
    state = variant.init()
    results = _play(variant, state, [0, 3, 1, 4, 2])
    final = results[-1]
    assert final.outcome.kind == 'win'
    assert final.outcome.winner == 'p1'
    assert final.next_turn is None
    assert variant.terminal_event(state, final.outcome) == ('gameOver', 'X')
    assert all(not r.outcome.terminal for r in results[:-1])


def test_full_board_without_line_is_a_draw():
    variant = TurnBoard()
    state = variant.init()
    results = _play(variant, state, [0, 1, 2, 4, 3, 5, 7, 6, 8])
    assert results[-1].outcome.kind == 'draw'
    assert variant.terminal_event(state, results[-1].outcome) == ('gameOver', 'Draw')


def test_marked_cells_never_change_across_random_games():
    rng = random.Random(99)
    variant = TurnBoard()
    for _ in range(50):
        state = variant.init()
        seen = {}
        slot = 'p1'
        while True:
            index = rng.randrange(9)
            try:
                result = variant.apply_move(state, slot, {'index': index})
            except ValidationError:
                assert index in seen
                continue
            seen[index] = state.board[index]
            assert all(state.board[i] == mark for i, mark in seen.items())
            if result.outcome.terminal:
                break
            slot = result.next_turn


def test_terminal_iff_line_or_full_board():
    for cells in itertools.product(['', 'X', 'O'], repeat=9):
        board = list(cells)
        has_line = any(board[a] and board[a] == board[b] == board[c] for a, b, c in WIN_LINES)
        full = '' not in board
        assert (find_winner(board) is not None) == (has_line or full)


def test_symbols_and_snapshot():
    variant = TurnBoard()
    state = variant.init()
    assert variant.symbol('p1') == 'X'
    assert variant.symbol('p2') == 'O'
    assert variant.snapshot(state) == {'board': [''] * 9}
