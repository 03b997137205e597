"""Errors raised by room and game-rule services.

Every error is local to the action that caused it. ``notify_sender`` tells
the transport whether the sender should get an ``errorMsg`` back or whether
the action is dropped silently.
"""


class GameError(Exception):
    notify_sender = False

    def __init__(self, message: str = ''):
        super().__init__(message)
        self.message = message


class ValidationError(GameError):
    """Malformed, out-of-turn or otherwise illegal move."""


class AuthorizationError(GameError):
    """Action reserved for the room host."""


class CapacityError(GameError):
    notify_sender = True


class NotFoundError(GameError):
    notify_sender = True
