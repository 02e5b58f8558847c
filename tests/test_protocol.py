"""
Unit tests for the JSON command protocol.
"""

import json
import unittest

from common.models import Player, Rect
from common.protocol import (
    Command, NewGame, ListGames, JoinGame, GameInfo, SendPosition, GetWorld,
    EatPotion, EndGame, InvalidRequest, DecodeError, REQUEST_TYPES,
    encode_request, decode_request, encode_response, decode_response,
    encode_player, decode_player
)


def raw(msg) -> bytes:
    return json.dumps(msg).encode('utf-8')


class TestRequestDecoding(unittest.TestCase):
    """Datagrams become tagged request variants."""

    def test_every_command_roundtrips(self):
        player = Player('Fred', Rect(10, 20, 34, 44))
        requests = [
            NewGame(), ListGames(), JoinGame('g1', 'Fred'), GameInfo('g1'),
            SendPosition('g1', 'Fred', player), GetWorld('g1'),
            EatPotion('g1', 'Fred'), EndGame('g1'),
        ]
        for request in requests:
            restored = decode_request(encode_request(request))
            self.assertEqual(type(restored), type(request))
            self.assertEqual(restored, request)

    def test_registered_commands(self):
        self.assertEqual(set(REQUEST_TYPES), {
            Command.NEW_GAME, Command.LIST_GAMES, Command.JOIN_GAME,
            Command.GAME_INFO, Command.SEND_POSITION, Command.GET_WORLD,
            Command.EAT_POTION, Command.END_GAME,
        })

    def test_wire_shape_of_sendposition(self):
        """meta travels as a nested JSON string."""
        player = Player('Fred', Rect(10, 20, 34, 44))
        msg = json.loads(encode_request(SendPosition('g1', 'Fred', player)))
        self.assertEqual(msg['command'], 'sendposition')
        self.assertEqual(msg['game_id'], 'g1')
        self.assertEqual(msg['name'], 'Fred')
        self.assertIsInstance(msg['meta'], str)
        self.assertEqual(json.loads(msg['meta'])['body'],
                         {'x': 10, 'y': 20, 'w': 34, 'h': 44})

    def test_extra_fields_ignored(self):
        """Clients may send the full generic object for every command."""
        request = decode_request(raw({'command': 'newgame', 'game_id': '',
                                      'name': '', 'meta': ''}))
        self.assertEqual(request, NewGame())

    def test_unknown_command(self):
        request = decode_request(raw({'command': 'launchmissiles'}))
        self.assertIsInstance(request, InvalidRequest)

    def test_missing_command(self):
        self.assertIsInstance(decode_request(raw({'game_id': 'g1'})),
                              InvalidRequest)

    def test_non_string_command(self):
        self.assertIsInstance(decode_request(raw({'command': 7})),
                              InvalidRequest)

    def test_missing_required_field(self):
        self.assertIsInstance(decode_request(raw({'command': 'joingame',
                                                  'game_id': 'g1'})),
                              InvalidRequest)

    def test_wrong_field_type(self):
        self.assertIsInstance(decode_request(raw({'command': 'gameinfo',
                                                  'game_id': 12})),
                              InvalidRequest)

    def test_bad_meta(self):
        for meta in ['not json', '{"name": "Fred"}', '[]']:
            request = decode_request(raw({'command': 'sendposition',
                                          'game_id': 'g1', 'name': 'Fred',
                                          'meta': meta}))
            self.assertIsInstance(request, InvalidRequest, meta)

    def test_meta_for_another_player(self):
        request = decode_request(raw({'command': 'sendposition',
                                      'game_id': 'g1', 'name': 'Fred',
                                      'meta': encode_player(Player('Wilma'))}))
        self.assertIsInstance(request, InvalidRequest)

    def test_deeply_nested_meta(self):
        request = decode_request(raw({'command': 'sendposition',
                                      'game_id': 'g1', 'name': 'Fred',
                                      'meta': '[' * 60000}))
        self.assertIsInstance(request, InvalidRequest)

    def test_deeply_nested_datagram_raises(self):
        for payload in [b'[' * 60000, b'[' * 5000 + b']' * 5000]:
            with self.assertRaises(DecodeError):
                decode_request(payload)

    def test_not_json_raises(self):
        with self.assertRaises(DecodeError):
            decode_request(b'\x01\x02garbage')

    def test_not_utf8_raises(self):
        with self.assertRaises(DecodeError):
            decode_request(b'\xff\xfe\xfd')

    def test_json_but_not_object_raises(self):
        for payload in [b'[1, 2]', b'"newgame"', b'42', b'null']:
            with self.assertRaises(DecodeError):
                decode_request(payload)

    def test_decode_error_is_value_error(self):
        self.assertTrue(issubclass(DecodeError, ValueError))

    def test_invalid_request_cannot_be_encoded(self):
        with self.assertRaises(TypeError):
            encode_request(InvalidRequest('nope'))


class TestResponses(unittest.TestCase):

    def test_response_roundtrip(self):
        response = {'games': [['abc', 0], ['def', 1]]}
        self.assertEqual(decode_response(encode_response(response)), response)

    def test_error_shape(self):
        response = decode_response(b'{"error": "Invalid Command"}')
        self.assertEqual(response, {'error': 'Invalid Command'})

    def test_garbage_response_raises(self):
        with self.assertRaises(DecodeError):
            decode_response(b'')


class TestPlayerMeta(unittest.TestCase):

    def test_player_roundtrip(self):
        player = Player('Wilma', Rect(1.5, 2.5, 34, 44))
        player.direction.left = True
        player.jump.jumping = True
        player.jump.offset = 12.0
        self.assertEqual(decode_player(encode_player(player)), player)

    def test_decode_player_rejects_garbage(self):
        with self.assertRaises(ValueError):
            decode_player('{')

    def test_decode_player_rejects_deep_nesting(self):
        with self.assertRaises(ValueError):
            decode_player('{"name": ' * 12000)


if __name__ == '__main__':
    unittest.main()
