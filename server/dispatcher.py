"""
Command dispatch: maps one decoded request to a response payload.

Handlers never raise for bad input. Registry failures turn into
``{"error": ...}`` responses; anything unrecognized gets "Invalid Command".
"""

from common.protocol import (
    Request, NewGame, ListGames, JoinGame, GameInfo,
    SendPosition, GetWorld, EatPotion, EndGame, error_response
)
from server.registry import SessionRegistry, SessionError


INVALID_COMMAND = 'Invalid Command'

HANDLERS = {}


def handles(request_type):
    def decorator(fn):
        HANDLERS[request_type] = fn
        return fn
    return decorator


@handles(NewGame)
def handle_new_game(registry: SessionRegistry, request: NewGame) -> dict:
    session = registry.create_session()
    return {'game_id': session.id}


@handles(ListGames)
def handle_list_games(registry: SessionRegistry, request: ListGames) -> dict:
    return {'games': registry.list_open()}


@handles(JoinGame)
def handle_join_game(registry: SessionRegistry, request: JoinGame) -> dict:
    return {'info': registry.join(request.game_id, request.name)}


@handles(GameInfo)
def handle_game_info(registry: SessionRegistry, request: GameInfo) -> dict:
    return {'game': registry.get(request.game_id).summary()}


@handles(SendPosition)
def handle_send_position(registry: SessionRegistry, request: SendPosition) -> dict:
    session = registry.replace_player(request.game_id, request.name,
                                      request.player)
    return session.to_dict()


@handles(GetWorld)
def handle_get_world(registry: SessionRegistry, request: GetWorld) -> dict:
    return registry.get(request.game_id).to_dict()


@handles(EatPotion)
def handle_eat_potion(registry: SessionRegistry, request: EatPotion) -> dict:
    return registry.eat_potion(request.game_id, request.name).to_dict()


@handles(EndGame)
def handle_end_game(registry: SessionRegistry, request: EndGame) -> dict:
    registry.complete(request.game_id)
    return {'info': f"completed game {request.game_id}"}


def dispatch(registry: SessionRegistry, request: Request) -> dict:
    """Resolve *request* against *registry* and build the response."""
    handler = HANDLERS.get(type(request))
    if handler is None:
        return error_response(INVALID_COMMAND)
    try:
        return handler(registry, request)
    except SessionError as e:
        return error_response(str(e))

