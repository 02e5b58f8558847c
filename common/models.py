"""
Session, player and potion records shared by server and client.

Every record converts to and from plain dicts so the protocol layer can put
it on the wire as JSON. ``from_dict`` raises ValueError on anything that does
not look like a record it produced.
"""

from common.config import (
    MAX_PLAYERS, PLAYER_WIDTH, PLAYER_HEIGHT,
    PLAYER_MAX_HP, PLAYER_MAX_MP, PLAYER_MAX_STR
)


def _require(data, key: str, kind):
    """Fetch ``data[key]`` and check its type."""
    if not isinstance(data, dict):
        raise ValueError(f"Expected an object, got {type(data).__name__}")
    if key not in data:
        raise ValueError(f"Missing field: {key}")
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected
    if isinstance(value, bool) and kind is not bool:
        raise ValueError(f"Field {key} has the wrong type")
    if not isinstance(value, kind):
        raise ValueError(f"Field {key} has the wrong type")
    return value


class Rect:
    """Axis-aligned rectangle: position plus hitbox."""

    __slots__ = ('x', 'y', 'w', 'h')

    def __init__(self, x: float = 0.0, y: float = 0.0,
                 w: float = PLAYER_WIDTH, h: float = PLAYER_HEIGHT):
        self.x = x
        self.y = y
        self.w = w
        self.h = h

    def overlaps(self, other: 'Rect') -> bool:
        """True if the two rectangles share any area."""
        return (self.x < other.x + other.w and other.x < self.x + self.w and
                self.y < other.y + other.h and other.y < self.y + self.h)

    def to_dict(self) -> dict:
        return {'x': self.x, 'y': self.y, 'w': self.w, 'h': self.h}

    @staticmethod
    def from_dict(data: dict) -> 'Rect':
        number = (int, float)
        return Rect(_require(data, 'x', number), _require(data, 'y', number),
                    _require(data, 'w', number), _require(data, 'h', number))

    def copy(self) -> 'Rect':
        return Rect(self.x, self.y, self.w, self.h)

    def __eq__(self, other):
        if not isinstance(other, Rect):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Rect(x={self.x}, y={self.y}, w={self.w}, h={self.h})"


class Direction:
    """Held movement inputs. Flags are independent, so diagonals are allowed."""

    __slots__ = ('up', 'down', 'left', 'right')

    def __init__(self, up: bool = False, down: bool = False,
                 left: bool = False, right: bool = False):
        self.up = up
        self.down = down
        self.left = left
        self.right = right

    def any(self) -> bool:
        return self.up or self.down or self.left or self.right

    def to_dict(self) -> dict:
        return {'up': self.up, 'down': self.down,
                'left': self.left, 'right': self.right}

    @staticmethod
    def from_dict(data: dict) -> 'Direction':
        return Direction(_require(data, 'up', bool), _require(data, 'down', bool),
                         _require(data, 'left', bool), _require(data, 'right', bool))

    def copy(self) -> 'Direction':
        return Direction(self.up, self.down, self.left, self.right)

    def __eq__(self, other):
        if not isinstance(other, Direction):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        held = [k for k, v in self.to_dict().items() if v]
        return f"Direction({'+'.join(held) or 'none'})"


class JumpState:
    """Vertical offset cycle, independent of horizontal movement."""

    __slots__ = ('jumping', 'offset', 'ascending')

    def __init__(self, jumping: bool = False, offset: float = 0.0,
                 ascending: bool = True):
        self.jumping = jumping
        self.offset = offset
        self.ascending = ascending

    def to_dict(self) -> dict:
        return {'jumping': self.jumping, 'offset': self.offset,
                'ascending': self.ascending}

    @staticmethod
    def from_dict(data: dict) -> 'JumpState':
        return JumpState(_require(data, 'jumping', bool),
                         _require(data, 'offset', (int, float)),
                         _require(data, 'ascending', bool))

    def copy(self) -> 'JumpState':
        return JumpState(self.jumping, self.offset, self.ascending)

    def __eq__(self, other):
        if not isinstance(other, JumpState):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return (f"JumpState(jumping={self.jumping}, offset={self.offset}, "
                f"ascending={self.ascending})")


class PotionType:
    """Potion kinds. Selects the visual sub-frame and the intended effect."""
    HEALTH = 'Health'
    MANA = 'Mana'

    ALL = (HEALTH, MANA)


class Potion:
    """A pickup placed somewhere on the screen."""

    __slots__ = ('position', 'potion_type')

    def __init__(self, position: Rect, potion_type: str = PotionType.HEALTH):
        self.position = position
        self.potion_type = potion_type

    def to_dict(self) -> dict:
        return {'position': self.position.to_dict(), 'type': self.potion_type}

    @staticmethod
    def from_dict(data: dict) -> 'Potion':
        potion_type = _require(data, 'type', str)
        if potion_type not in PotionType.ALL:
            raise ValueError(f"Unknown potion type: {potion_type}")
        return Potion(Rect.from_dict(_require(data, 'position', dict)),
                      potion_type)

    def copy(self) -> 'Potion':
        return Potion(self.position.copy(), self.potion_type)

    def __eq__(self, other):
        if not isinstance(other, Potion):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Potion({self.potion_type} at {self.position!r})"


class Player:
    """
    One participant's full state.

    ``animation_frame`` is client-local and never leaves the process;
    everything else travels as the ``meta`` of a sendposition request
    and inside every full session encoding.
    """

    __slots__ = ('name', 'body', 'direction', 'last_direction', 'acceleration',
                 'jump', 'hp', 'mp', 'str', 'ate', 'animation_frame')

    def __init__(self, name: str, body: Rect = None,
                 direction: Direction = None, last_direction: Direction = None,
                 acceleration: float = 0.0, jump: JumpState = None,
                 hp: int = PLAYER_MAX_HP, mp: int = PLAYER_MAX_MP,
                 str: int = PLAYER_MAX_STR, ate: Potion = None):
        self.name = name
        self.body = body if body is not None else Rect(100.0, 100.0)
        self.direction = direction if direction is not None else Direction()
        self.last_direction = (last_direction if last_direction is not None
                               else Direction())
        self.acceleration = acceleration
        self.jump = jump if jump is not None else JumpState()
        self.hp = hp
        self.mp = mp
        self.str = str
        self.ate = ate
        self.animation_frame = 0

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'body': self.body.to_dict(),
            'direction': self.direction.to_dict(),
            'last_direction': self.last_direction.to_dict(),
            'acceleration': self.acceleration,
            'jump': self.jump.to_dict(),
            'hp': self.hp, 'mp': self.mp, 'str': self.str,
            'ate': self.ate.to_dict() if self.ate is not None else None,
        }

    @staticmethod
    def from_dict(data: dict) -> 'Player':
        ate = _require(data, 'ate', (dict, type(None)))
        return Player(
            name=_require(data, 'name', str),
            body=Rect.from_dict(_require(data, 'body', dict)),
            direction=Direction.from_dict(_require(data, 'direction', dict)),
            last_direction=Direction.from_dict(
                _require(data, 'last_direction', dict)),
            acceleration=_require(data, 'acceleration', (int, float)),
            jump=JumpState.from_dict(_require(data, 'jump', dict)),
            hp=_require(data, 'hp', int),
            mp=_require(data, 'mp', int),
            str=_require(data, 'str', int),
            ate=Potion.from_dict(ate) if ate is not None else None,
        )

    def copy(self) -> 'Player':
        p = Player(self.name, self.body.copy(), self.direction.copy(),
                   self.last_direction.copy(), self.acceleration,
                   self.jump.copy(), self.hp, self.mp, self.str,
                   self.ate.copy() if self.ate is not None else None)
        p.animation_frame = self.animation_frame
        return p

    def __eq__(self, other):
        if not isinstance(other, Player):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"Player(name={self.name!r}, body={self.body!r})"


class Session:
    """
    One match (a "networked game").

    Holds data and capacity checks only; the registry drives transitions.
    """

    __slots__ = ('id', 'players', 'started', 'completed', 'completed_at',
                 'potion')

    def __init__(self, session_id: str, players: list = None,
                 started: bool = False, completed: bool = False,
                 potion: Potion = None):
        self.id = session_id
        self.players = players if players is not None else []
        self.started = started
        self.completed = completed
        self.completed_at = None   # Server-local clock, not on the wire
        self.potion = potion

    @property
    def player_count(self) -> int:
        return len(self.players)

    def is_full(self) -> bool:
        return len(self.players) >= MAX_PLAYERS

    def find_player(self, name: str):
        """First player with this name, or None."""
        for player in self.players:
            if player.name == name:
                return player
        return None

    def summary(self) -> list:
        """``[id, player_count]`` as used by listgames and gameinfo."""
        return [self.id, len(self.players)]

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'players': [p.to_dict() for p in self.players],
            'started': self.started,
            'completed': self.completed,
            'potion': self.potion.to_dict() if self.potion is not None else None,
        }

    @staticmethod
    def from_dict(data: dict) -> 'Session':
        raw_players = _require(data, 'players', list)
        if len(raw_players) > MAX_PLAYERS:
            raise ValueError(f"Session has {len(raw_players)} players, "
                             f"at most {MAX_PLAYERS} allowed")
        potion = data.get('potion') if isinstance(data, dict) else None
        return Session(
            _require(data, 'id', str),
            [Player.from_dict(p) for p in raw_players],
            _require(data, 'started', bool),
            _require(data, 'completed', bool),
            Potion.from_dict(potion) if potion is not None else None,
        )

    def __repr__(self):
        return (f"Session(id={self.id}, players={len(self.players)}, "
                f"started={self.started}, completed={self.completed})")
