"""
JSON command protocol.

Request (one JSON object per datagram):
    {"command": <str>, "game_id": <str>, "name": <str>, "meta": <str>}

Each command carries only the fields it needs. ``meta`` is itself a JSON
document holding a Player record (sendposition only).

Responses are JSON objects. Failures are always ``{"error": <str>}``; success
shapes differ per command, so callers branch on the command they sent.
"""

import json

from common.models import Player


ENCODING = 'utf-8'


class DecodeError(ValueError):
    """Raised when a datagram is not a JSON object at all."""


class Command:
    """Command names on the wire."""
    NEW_GAME      = 'newgame'
    LIST_GAMES    = 'listgames'
    JOIN_GAME     = 'joingame'
    GAME_INFO     = 'gameinfo'
    SEND_POSITION = 'sendposition'
    GET_WORLD     = 'getworld'
    EAT_POTION    = 'eatpotion'
    END_GAME      = 'endgame'


class Request:
    """Base for decoded requests: one subclass per command."""

    command = None
    __slots__ = ()

    def to_dict(self) -> dict:
        msg = {'command': self.command}
        for field in self.__slots__:
            msg[field] = getattr(self, field)
        return msg

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return all(getattr(self, f) == getattr(other, f) for f in self.__slots__)

    def __repr__(self):
        fields = ', '.join(f"{f}={getattr(self, f)!r}" for f in self.__slots__)
        return f"{type(self).__name__}({fields})"


class NewGame(Request):
    command = Command.NEW_GAME
    __slots__ = ()


class ListGames(Request):
    command = Command.LIST_GAMES
    __slots__ = ()


class JoinGame(Request):
    command = Command.JOIN_GAME
    __slots__ = ('game_id', 'name')

    def __init__(self, game_id: str, name: str):
        self.game_id = game_id
        self.name = name


class GameInfo(Request):
    command = Command.GAME_INFO
    __slots__ = ('game_id',)

    def __init__(self, game_id: str):
        self.game_id = game_id


class SendPosition(Request):
    command = Command.SEND_POSITION
    __slots__ = ('game_id', 'name', 'player')

    def __init__(self, game_id: str, name: str, player: Player):
        self.game_id = game_id
        self.name = name
        self.player = player

    def to_dict(self) -> dict:
        return {
            'command': self.command,
            'game_id': self.game_id,
            'name': self.name,
            'meta': encode_player(self.player),
        }


class GetWorld(Request):
    command = Command.GET_WORLD
    __slots__ = ('game_id',)

    def __init__(self, game_id: str):
        self.game_id = game_id


class EatPotion(Request):
    command = Command.EAT_POTION
    __slots__ = ('game_id', 'name')

    def __init__(self, game_id: str, name: str):
        self.game_id = game_id
        self.name = name


class EndGame(Request):
    command = Command.END_GAME
    __slots__ = ('game_id',)

    def __init__(self, game_id: str):
        self.game_id = game_id


class InvalidRequest(Request):
    """A well-formed object that names no known command or lacks fields."""

    command = None
    __slots__ = ('reason',)

    def __init__(self, reason: str):
        self.reason = reason

    def to_dict(self) -> dict:
        raise TypeError("InvalidRequest cannot be encoded")


REQUEST_TYPES = {
    cls.command: cls for cls in (
        NewGame, ListGames, JoinGame, GameInfo,
        SendPosition, GetWorld, EatPotion, EndGame,
    )
}


# ── Player records (the ``meta`` field) ──

def encode_player(player: Player) -> str:
    return json.dumps(player.to_dict())


def decode_player(text: str) -> Player:
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError) as e:
        raise ValueError(f"Player record is not JSON: {e}") from e
    return Player.from_dict(data)


# ── Requests ──

def encode_request(request: Request) -> bytes:
    return json.dumps(request.to_dict()).encode(ENCODING)


def _load_object(data: bytes) -> dict:
    try:
        msg = json.loads(data.decode(ENCODING))
    except (UnicodeDecodeError, ValueError, RecursionError) as e:
        raise DecodeError(f"Not a JSON document: {e}") from e
    if not isinstance(msg, dict):
        raise DecodeError(f"Expected a JSON object, got {type(msg).__name__}")
    return msg


def decode_request(data: bytes) -> Request:
    """
    Decode one datagram into a Request.

    Raises DecodeError if the bytes are not a JSON object. Objects with an
    unknown command, missing string fields, an unreadable ``meta``, or a
    ``meta`` naming someone other than ``name`` decode to InvalidRequest so
    the server can still answer them.
    """
    msg = _load_object(data)

    command = msg.get('command')
    cls = REQUEST_TYPES.get(command) if isinstance(command, str) else None
    if cls is None:
        return InvalidRequest(f"unknown command {command!r}")

    wire_fields = [f if f != 'player' else 'meta' for f in cls.__slots__]
    values = []
    for field in wire_fields:
        value = msg.get(field)
        if not isinstance(value, str):
            return InvalidRequest(f"{command}: missing field {field!r}")
        values.append(value)

    if cls is SendPosition:
        try:
            values[-1] = decode_player(values[-1])
        except ValueError as e:
            return InvalidRequest(f"{command}: bad meta ({e})")
        if values[-1].name != values[1]:
            return InvalidRequest(f"{command}: meta is for {values[-1].name!r}, "
                                  f"not {values[1]!r}")

    return cls(*values)


# ── Responses ──

def encode_response(response: dict) -> bytes:
    return json.dumps(response).encode(ENCODING)


def decode_response(data: bytes) -> dict:
    return _load_object(data)


def error_response(message: str) -> dict:
    return {'error': message}
