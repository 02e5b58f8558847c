"""
Operator tool: send one protocol command and print the literal reply.

    python -m client.admin newgame
    python -m client.admin joingame --game-id <id> --name Fred
    python -m client.admin getworld --game-id <id>
"""

import json
import socket

from common.config import DEFAULT_PORT, CLIENT_RECV_TIMEOUT
from common.net import round_trip
from common.protocol import ENCODING


def build_request(command: str, game_id: str = None, name: str = None,
                  meta: str = None) -> dict:
    """Raw request object; fields left as None are omitted."""
    msg = {'command': command}
    for key, value in (('game_id', game_id), ('name', name), ('meta', meta)):
        if value is not None:
            msg[key] = value
    return msg


def send_command(msg: dict, host: str = '127.0.0.1', port: int = DEFAULT_PORT,
                 timeout: float = CLIENT_RECV_TIMEOUT) -> str:
    """
    Send *msg* and return the reply text, or a local error string when the
    server cannot be reached.
    """
    data = json.dumps(msg).encode(ENCODING)
    try:
        reply = round_trip(data, (host, port), timeout)
    except socket.timeout:
        return f"[ADMIN] No reply from {host}:{port} within {timeout}s"
    except OSError as e:
        return f"[ADMIN] Could not reach {host}:{port}: {e}"
    return reply.decode(ENCODING, errors='replace')


def main():
    import argparse
    parser = argparse.ArgumentParser(description='Duel Sync admin command')
    parser.add_argument('command', help='newgame, listgames, joingame, gameinfo, '
                                        'sendposition, getworld, eatpotion, endgame')
    parser.add_argument('--game-id', default=None)
    parser.add_argument('--name', default=None)
    parser.add_argument('--meta', default=None,
                        help='Player record as JSON (sendposition)')
    parser.add_argument('--host', default='127.0.0.1', help='Server address')
    parser.add_argument('--port', type=int, default=DEFAULT_PORT, help='Server port')
    parser.add_argument('--timeout', type=float, default=1.0,
                        help='Seconds to wait for the reply')
    args = parser.parse_args()

    msg = build_request(args.command, args.game_id, args.name, args.meta)
    print(send_command(msg, args.host, args.port, args.timeout))


if __name__ == '__main__':
    main()
