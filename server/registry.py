"""
Session registry on the server side.
Creates, finds and mutates sessions; owned by the server loop.
"""

import random
import time
import uuid

from common.config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, POTION_SIZE, SPAWN_POINTS, SESSION_TTL,
    MAX_NAME_LENGTH
)
from common.models import Session, Player, Potion, PotionType, Rect


class SessionError(Exception):
    """Base for registry failures. ``str()`` is the error text sent to clients."""


class InvalidGame(SessionError):
    def __init__(self, game_id: str):
        super().__init__(f"Invalid Game {game_id}")
        self.game_id = game_id


class GameFull(SessionError):
    def __init__(self, game_id: str):
        super().__init__(f"game {game_id} is full")
        self.game_id = game_id


class GameCompleted(SessionError):
    def __init__(self, game_id: str):
        super().__init__(f"game {game_id} is completed")
        self.game_id = game_id


class NameTaken(SessionError):
    def __init__(self, game_id: str, name: str):
        super().__init__(f"name {name} is already taken in game {game_id}")
        self.game_id = game_id
        self.name = name


class BadName(SessionError):
    def __init__(self, name: str):
        super().__init__(f"name must be 1 to {MAX_NAME_LENGTH} characters")
        self.name = name


def spawn_potion(rng: random.Random) -> Potion:
    """Place a potion of random type somewhere fully on screen."""
    x = rng.randint(0, SCREEN_WIDTH - POTION_SIZE)
    y = rng.randint(0, SCREEN_HEIGHT - POTION_SIZE)
    return Potion(Rect(float(x), float(y), POTION_SIZE, POTION_SIZE),
                  rng.choice(PotionType.ALL))


class SessionRegistry:
    """All sessions hosted by one server process, in creation order."""

    def __init__(self, session_ttl: float = SESSION_TTL,
                 rng: random.Random = None, clock=time.monotonic):
        self.sessions = {}          # game_id -> Session
        self.session_ttl = session_ttl
        self.rng = rng or random.Random()
        self.clock = clock

    def create_session(self) -> Session:
        """Register a new, empty session."""
        game_id = str(uuid.uuid4())
        while game_id in self.sessions:
            game_id = str(uuid.uuid4())
        session = Session(game_id, potion=spawn_potion(self.rng))
        self.sessions[game_id] = session
        return session

    def find(self, game_id: str):
        """Look a session up by id. None if there is no such session."""
        return self.sessions.get(game_id)

    def get(self, game_id: str) -> Session:
        """Like find(), but raises InvalidGame when the id is unknown."""
        session = self.sessions.get(game_id)
        if session is None:
            raise InvalidGame(game_id)
        return session

    def join(self, game_id: str, name: str) -> str:
        """
        Add a player to a session and return the status message.

        The session starts the moment the join that fills it is processed.
        """
        session = self.get(game_id)
        if session.completed:
            raise GameCompleted(game_id)
        if session.started or session.is_full():
            raise GameFull(game_id)
        if not 0 < len(name) <= MAX_NAME_LENGTH:
            raise BadName(name)
        if session.find_player(name) is not None:
            raise NameTaken(game_id, name)

        x, y = SPAWN_POINTS[len(session.players) % len(SPAWN_POINTS)]
        session.players.append(Player(name, Rect(x, y)))
        if session.is_full():
            session.started = True

        state = 'started' if session.started else 'not started'
        return (f"joined {state} game {game_id} "
                f"with {len(session.players)} players")

    def list_open(self) -> list:
        """``[id, player_count]`` for every session still waiting for players."""
        return [s.summary() for s in self.sessions.values()
                if not s.started and not s.completed]

    def replace_player(self, game_id: str, name: str, record: Player) -> Session:
        """
        Overwrite the named player with a client-submitted record.

        An unknown name leaves the session untouched.
        """
        session = self.get(game_id)
        for i, player in enumerate(session.players):
            if player.name == name:
                # The slot keeps its name; a record cannot rename its player
                record.name = name
                session.players[i] = record
                break
        return session

    def eat_potion(self, game_id: str, name: str) -> Session:
        """
        Let the named player pick up the session's potion.

        Only happens if the server's copy of the player overlaps the potion;
        otherwise nothing changes.
        """
        session = self.get(game_id)
        player = session.find_player(name)
        if (player is not None and session.potion is not None and
                player.body.overlaps(session.potion.position)):
            player.ate = session.potion
            session.potion = spawn_potion(self.rng)
        return session

    def complete(self, game_id: str) -> Session:
        """Mark a session completed. Repeated calls keep the first timestamp."""
        session = self.get(game_id)
        if not session.completed:
            session.completed = True
            session.completed_at = self.clock()
        return session

    def collect_garbage(self, now: float = None) -> list:
        """Drop sessions completed more than ``session_ttl`` ago. Returns their ids."""
        now = self.clock() if now is None else now
        expired = [
            gid for gid, s in self.sessions.items()
            if s.completed and s.completed_at is not None
            and now - s.completed_at > self.session_ttl
        ]
        for gid in expired:
            del self.sessions[gid]
        return expired

    @property
    def count(self) -> int:
        return len(self.sessions)
