"""Math wars: both players race to answer the same arithmetic question."""

import operator
from dataclasses import dataclass, field
from typing import Dict

from .base import GameVariant, MoveResult, Outcome, P1, P2
from .errors import ValidationError

OPERATORS = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
}
# Operand ceiling per operator; multiplication stays small
OPERAND_MAX = {'+': 20, '-': 20, '*': 10}
DEFAULT_WIN_SCORE = 10


@dataclass(frozen=True)
class Question:
    left: int
    op: str
    right: int

    @property
    def answer(self) -> int:
        return OPERATORS[self.op](self.left, self.right)

    @property
    def text(self) -> str:
        return f'{self.left} {self.op} {self.right}'


@dataclass
class SpeedDuelState:
    question: Question
    scores: Dict[str, int] = field(default_factory=lambda: {P1: 0, P2: 0})


def parse_answer(raw) -> int:
    if isinstance(raw, bool):
        raise ValidationError('answer is not a number')
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError(f'answer {raw!r} is not a number')


class SpeedDuel(GameVariant):
    game_type = 'mathwars'
    move_event = 'submitMathAnswer'
    turn_based = False

    def __init__(self, rng=None, win_score: int = DEFAULT_WIN_SCORE):
        super().__init__(rng)
        self.win_score = win_score

    def new_question(self) -> Question:
        op = self.rng.choice(list(OPERATORS))
        top = OPERAND_MAX[op]
        return Question(self.rng.randint(1, top), op, self.rng.randint(1, top))

    def init(self):
        return SpeedDuelState(question=self.new_question())

    def apply_move(self, state, slot, move):
        answer = parse_answer((move or {}).get('answer'))
        if answer != state.question.answer:
            raise ValidationError('wrong answer')

        state.scores[slot] += 1
        if state.scores[slot] >= self.win_score:
            return MoveResult(outcome=Outcome.win(slot))

        state.question = self.new_question()
        return MoveResult(events=[('nextMathQuestion', {
            'q': state.question.text,
            'scores': dict(state.scores),
            'scorer': slot,
        })])

    def snapshot(self, state):
        return {'question': state.question.text, 'scores': dict(state.scores)}

    def restart_payload(self, state):
        # restartGame clients read the question as 'q'
        payload = self.snapshot(state)
        payload['q'] = state.question.text
        return payload

    def terminal_event(self, state, outcome):
        return 'gameOverMath', {'winner': outcome.winner, 'scores': dict(state.scores)}
