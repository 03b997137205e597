"""In-memory room table keyed by PIN."""

import random
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .base import GameVariant, P1, P2, SLOTS
from .errors import CapacityError, NotFoundError

PIN_MIN = 1000
PIN_MAX = 9999

WAITING = 'waiting'
ACTIVE = 'active'
FINISHED = 'finished'


@dataclass
class Peer:
    id: str
    name: Optional[str] = None

    def to_dict(self):
        return {'id': self.id, 'name': self.name}


@dataclass
class Room:
    pin: str
    game_type: str
    state: Any
    players: Dict[str, Optional[Peer]] = field(default_factory=lambda: {P1: None, P2: None})
    turn: str = P1
    status: str = WAITING
    # Bumped on every re-initialisation so deferred tasks can detect staleness
    generation: int = 0
    closed: bool = False
    last_activity: float = field(default_factory=time.time)
    lock: Any = field(default_factory=threading.Lock, repr=False, compare=False)

    def slot_of(self, peer_id: str) -> Optional[str]:
        for slot in SLOTS:
            peer = self.players[slot]
            if peer is not None and peer.id == peer_id:
                return slot
        return None

    def occupants(self) -> List[Peer]:
        return [p for p in self.players.values() if p is not None]

    @property
    def host(self) -> Optional[Peer]:
        return self.players[P1]

    def touch(self) -> None:
        self.last_activity = time.time()

    def players_dict(self):
        return {slot: (p.to_dict() if p else None) for slot, p in self.players.items()}


def normalize_pin(pin) -> str:
    return str(pin if pin is not None else '').strip()


class RoomRegistry:
    """Owns PIN allocation, seating and teardown.

    The registry lock only guards the PIN table. Callers that mutate a room
    hold ``room.lock`` first; the registry never takes a room lock itself.
    """

    def __init__(self, variants: Dict[str, GameVariant], rng: Optional[random.Random] = None):
        self.variants = dict(variants)
        self.rng = rng or random.Random()
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self):
        return len(self._rooms)

    def __contains__(self, pin):
        return normalize_pin(pin) in self._rooms

    def variant(self, game_type: str) -> GameVariant:
        try:
            return self.variants[game_type]
        except KeyError:
            raise NotFoundError(f'Unknown game type: {game_type}')

    def allocate(self, game_type: str, creator: Peer) -> Tuple[str, Room]:
        variant = self.variant(game_type)
        state = variant.init()
        with self._lock:
            if len(self._rooms) > PIN_MAX - PIN_MIN:
                raise RuntimeError('No free room PINs left')
            while True:
                pin = str(self.rng.randint(PIN_MIN, PIN_MAX))
                if pin not in self._rooms:
                    break
            room = Room(pin=pin, game_type=game_type, state=state)
            room.players[P1] = creator
            self._rooms[pin] = room
        return pin, room

    def lookup(self, pin) -> Optional[Room]:
        return self._rooms.get(normalize_pin(pin))

    def seat_second_player(self, pin, identity: Peer) -> str:
        room = self.lookup(pin)
        if room is None or room.closed:
            raise NotFoundError('Invalid PIN')
        if room.players[P2] is not None or room.slot_of(identity.id):
            raise CapacityError('Room is full')
        room.players[P2] = identity
        return P2

    def vacate(self, pin, peer_id: str) -> Optional[str]:
        room = self.lookup(pin)
        if room is None:
            return None
        slot = room.slot_of(peer_id)
        if slot is not None:
            room.players[slot] = None
        if not room.occupants():
            self.remove(room.pin)
        return slot

    def remove(self, pin) -> Optional[Room]:
        with self._lock:
            room = self._rooms.pop(normalize_pin(pin), None)
        if room is not None:
            room.closed = True
        return room

    def rooms_for(self, peer_id: str) -> List[Room]:
        with self._lock:
            rooms = list(self._rooms.values())
        return [r for r in rooms if r.slot_of(peer_id)]

    def idle_rooms(self, max_idle: float, now: Optional[float] = None) -> List[Room]:
        now = time.time() if now is None else now
        with self._lock:
            rooms = list(self._rooms.values())
        return [r for r in rooms if now - r.last_activity >= max_idle]
