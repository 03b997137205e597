"""Routes peer actions into rooms and fans the results back out.

Each action resolves its room, takes that room's lock and only then reads or
changes the room, so actions on one PIN apply strictly one after another while
other PINs carry on independently.
"""

import logging
from typing import Any, Dict, Optional

from .base import P1, P2, other_slot
from .errors import AuthorizationError, NotFoundError, ValidationError
from .rooms import ACTIVE, FINISHED, WAITING, Peer, Room, RoomRegistry


class InlineScheduler:
    """Runs deferred work immediately. Useful when no event loop is around."""

    def schedule(self, delay: float, fn, *args) -> None:
        fn(*args)


class SessionManager:
    def __init__(
        self,
        registry: RoomRegistry,
        leaderboard,
        notifier,
        scheduler=None,
        settle_delay: float = 1.0,
        chat_max_length: int = 500,
        logger: Optional[logging.Logger] = None,
    ):
        self.registry = registry
        self.leaderboard = leaderboard
        self.notifier = notifier
        self.scheduler = scheduler or InlineScheduler()
        self.settle_delay = settle_delay
        self.chat_max_length = chat_max_length
        self.logger = logger or logging.getLogger(__name__)

    # ---- lifecycle ----

    def create(self, peer_id: str, game_type: str, username: Optional[str] = None) -> Room:
        variant = self.registry.variant(game_type)
        username = _clean_name(username)
        self.leaderboard.ensure_player(username)
        pin, room = self.registry.allocate(game_type, Peer(peer_id, username))
        with room.lock:
            self.notifier.join(peer_id, pin)
            self.notifier.to_peer(peer_id, 'assignSymbol', variant.symbol(P1))
            self.notifier.to_peer(peer_id, 'gameCreated', pin)
        self.logger.info(f"[room-create] pin={pin} type={game_type} host={username}")
        return room

    def join(self, peer_id: str, pin, username: Optional[str] = None) -> Room:
        room = self._resolve(pin)
        username = _clean_name(username)
        with room.lock:
            self._ensure_open(room)
            slot = self.registry.seat_second_player(room.pin, Peer(peer_id, username))
            room.status = ACTIVE
            room.touch()
            variant = self.registry.variant(room.game_type)
            self.notifier.join(peer_id, room.pin)
            self.notifier.to_peer(peer_id, 'assignSymbol', variant.symbol(slot))
            self.notifier.to_room(room.pin, 'startGame', self._start_payload(room))
        self.leaderboard.ensure_player(username)
        self.logger.info(f"[room-join] pin={room.pin} slot={slot} name={username}")
        return room

    def reset(self, peer_id: str, pin) -> Room:
        room = self._resolve(pin)
        with room.lock:
            self._ensure_open(room)
            host = room.host
            if host is None or host.id != peer_id:
                raise AuthorizationError('Only the host can restart the game')
            self._reinitialise(room)
            self.notifier.to_room(room.pin, 'restartGame', self._start_payload(room, restart=True))
        self.logger.info(f"[room-reset] pin={room.pin} generation={room.generation}")
        return room

    def leave(self, peer_id: str, pin) -> None:
        room = self._resolve(pin)
        with room.lock:
            self._ensure_open(room)
            if room.slot_of(peer_id) is None:
                raise ValidationError('Not seated in this room')
            self._depart(room, peer_id)
        self.notifier.leave(peer_id, room.pin)

    def disconnect(self, peer_id: str) -> None:
        for room in self.registry.rooms_for(peer_id):
            with room.lock:
                if room.closed or room.slot_of(peer_id) is None:
                    continue
                self._depart(room, peer_id)

    def close_idle_rooms(self, max_idle: float, now: Optional[float] = None):
        closed = []
        for room in self.registry.idle_rooms(max_idle, now):
            with room.lock:
                if room.closed:
                    continue
                self.registry.remove(room.pin)
                self.notifier.to_room(room.pin, 'roomClosed', {'pin': room.pin, 'reason': 'idle'})
            closed.append(room.pin)
            self.logger.info(f"[room-expire] pin={room.pin}")
        return closed

    # ---- play ----

    def move(self, peer_id: str, pin, game_type: str, move: Dict[str, Any]) -> None:
        room = self._resolve(pin)
        revert = None
        with room.lock:
            self._ensure_open(room)
            if room.game_type != game_type:
                raise ValidationError(f'Room {room.pin} is not a {game_type} game')
            if room.status != ACTIVE:
                raise ValidationError('Game is not in progress')
            slot = room.slot_of(peer_id)
            if slot is None:
                raise ValidationError('Not seated in this room')
            variant = self.registry.variant(room.game_type)
            if variant.turn_based and room.turn != slot:
                raise ValidationError(f'Not your turn ({room.turn} to play)')

            result = variant.apply_move(room.state, slot, move)
            room.touch()
            for event, payload in result.events:
                self.notifier.to_room(room.pin, event, payload)
            if result.next_turn:
                room.turn = result.next_turn

            if result.outcome.terminal:
                room.status = FINISHED
                if result.outcome.winner:
                    self._record_win(room, result.outcome.winner)
                event, payload = variant.terminal_event(room.state, result.outcome)
                self.notifier.to_room(room.pin, event, payload)
                self.logger.info(f"[game-over] pin={room.pin} type={room.game_type} result={result.outcome.kind} winner={result.outcome.winner}")
            elif result.pending:
                revert = (room.pin, room.generation, tuple(room.state.flipped))

        if revert:
            self.scheduler.schedule(self.settle_delay, self._settle_pending, *revert)

    def chat(self, peer_id: str, pin, message, username: Optional[str] = None) -> None:
        room = self._resolve(pin)
        self._ensure_open(room)
        if room.slot_of(peer_id) is None:
            raise ValidationError('Not seated in this room')
        text = str(message or '').strip()
        if not text:
            raise ValidationError('Empty chat message')
        self.notifier.to_room(room.pin, 'receiveMessage', {
            'username': _clean_name(username),
            'message': text[:self.chat_max_length],
        })

    def leaderboard_snapshot(self):
        return self.leaderboard.top()

    # ---- internals ----

    def _settle_pending(self, pin: str, generation: int, pair) -> None:
        room = self.registry.lookup(pin)
        if room is None:
            self.logger.info(f"[revert-abort] pin={pin} room gone")
            return
        with room.lock:
            if room.closed or room.generation != generation or tuple(room.state.flipped) != tuple(pair):
                self.logger.info(f"[revert-abort] pin={pin} generation={generation} stale")
                return
            self.registry.variant(room.game_type).resolve_pending(room.state)
            room.turn = other_slot(room.turn)
            self.notifier.to_room(room.pin, 'memoryMismatch', {'indices': list(pair), 'turn': room.turn})

    def _record_win(self, room: Room, slot: str) -> None:
        peer = room.players[slot]
        ranking = self.leaderboard.award_win(peer.name if peer else None, room.game_type)
        if ranking is not None:
            self.notifier.to_all('updateLeaderboard', ranking)

    def _depart(self, room: Room, peer_id: str) -> None:
        slot = self.registry.vacate(room.pin, peer_id)
        remaining = room.occupants()
        self.logger.info(f"[room-leave] pin={room.pin} slot={slot} remaining={len(remaining)}")
        if not remaining:
            self.logger.info(f"[room-close] pin={room.pin}")
            return
        promoted = room.players[P1] is None
        if promoted:
            # The remaining guest becomes host so the free seat is always p2
            room.players[P1], room.players[P2] = room.players[P2], None
        self._reinitialise(room)
        host = room.players[P1]
        self.notifier.to_peer(host.id, 'opponentLeft', None)
        if promoted:
            variant = self.registry.variant(room.game_type)
            self.notifier.to_peer(host.id, 'assignSymbol', variant.symbol(P1))
        # Fresh board so the remaining client drops the abandoned game
        self.notifier.to_peer(host.id, 'restartGame', self._start_payload(room, restart=True))

    def _reinitialise(self, room: Room) -> None:
        room.state = self.registry.variant(room.game_type).init()
        room.generation += 1
        room.turn = P1
        room.status = ACTIVE if room.players[P1] and room.players[P2] else WAITING
        room.touch()

    def _start_payload(self, room: Room, restart: bool = False) -> Dict[str, Any]:
        payload = {
            'pin': room.pin,
            'type': room.game_type,
            'players': room.players_dict(),
            'turn': room.turn,
        }
        variant = self.registry.variant(room.game_type)
        payload.update(variant.restart_payload(room.state) if restart else variant.snapshot(room.state))
        return payload

    def _resolve(self, pin) -> Room:
        room = self.registry.lookup(pin)
        if room is None:
            raise NotFoundError('Invalid PIN')
        return room

    @staticmethod
    def _ensure_open(room: Room) -> None:
        if room.closed:
            raise NotFoundError('Invalid PIN')


def _clean_name(username) -> Optional[str]:
    name = str(username).strip() if username is not None else ''
    return name[:64] or None
