"""
Client side of the command protocol: one blocking, timeout-bounded
round trip per request.
"""

import time

from common.config import DEFAULT_PORT, CLIENT_RECV_TIMEOUT
from common.models import Session, Player
from common.net import round_trip, NetworkSimulator
from common.protocol import (
    Request, NewGame, ListGames, JoinGame, GameInfo, SendPosition,
    GetWorld, EatPotion, EndGame, encode_request, decode_response
)


class ServerError(Exception):
    """The server answered with an ``{"error": ...}`` response."""

    def __init__(self, command: str, message: str):
        super().__init__(message)
        self.command = command


class ServerConnection:
    """
    Issues requests to one session server.

    Transport failures propagate as OSError (socket.timeout when no reply
    arrives in time); error responses raise ServerError; replies that are not
    JSON objects raise DecodeError.
    """

    def __init__(self, host: str = '127.0.0.1', port: int = DEFAULT_PORT,
                 timeout: float = CLIENT_RECV_TIMEOUT,
                 net_sim: NetworkSimulator = None, metrics=None):
        self.server_addr = (host, port)
        self.timeout = timeout
        self.net_sim = net_sim
        self.metrics = metrics

    def request(self, request: Request) -> dict:
        """Send *request*, wait for the reply and return the decoded response."""
        start = time.perf_counter()
        reply = round_trip(encode_request(request), self.server_addr,
                           self.timeout, self.net_sim)
        if self.metrics is not None:
            self.metrics.log_rtt(request.command,
                                 (time.perf_counter() - start) * 1000.0)
        response = decode_response(reply)
        if 'error' in response:
            raise ServerError(request.command, str(response['error']))
        return response

    def new_game(self) -> str:
        return self.request(NewGame())['game_id']

    def list_games(self) -> list:
        return [tuple(g) for g in self.request(ListGames())['games']]

    def join_game(self, game_id: str, name: str) -> str:
        return self.request(JoinGame(game_id, name))['info']

    def game_info(self, game_id: str) -> tuple:
        return tuple(self.request(GameInfo(game_id))['game'])

    def send_position(self, game_id: str, player: Player) -> Session:
        response = self.request(SendPosition(game_id, player.name, player))
        return Session.from_dict(response)

    def get_world(self, game_id: str) -> Session:
        return Session.from_dict(self.request(GetWorld(game_id)))

    def eat_potion(self, game_id: str, name: str) -> Session:
        return Session.from_dict(self.request(EatPotion(game_id, name)))

    def end_game(self, game_id: str) -> str:
        return self.request(EndGame(game_id))['info']
