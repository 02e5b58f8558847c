"""
Unit tests for the local render-tick simulation.
"""

import unittest

from client import physics
from common.config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, ACCELERATION_MAX, JUMP_HEIGHT,
    PLAYER_MOVE_SPEED, ACCELERATION_STEP
)
from common.models import Player, Rect, Direction, Potion, PotionType


class TestMovement(unittest.TestCase):

    def setUp(self):
        self.player = Player('Fred', Rect(300.0, 200.0))

    def test_move_right(self):
        self.player.direction = Direction(right=True)
        physics.step(self.player)
        self.assertGreater(self.player.body.x, 300.0)
        self.assertEqual(self.player.body.y, 200.0)

    def test_move_up(self):
        self.player.direction = Direction(up=True)
        physics.step(self.player)
        self.assertLess(self.player.body.y, 200.0)

    def test_first_step_distance(self):
        self.player.direction = Direction(left=True)
        physics.step(self.player)
        self.assertAlmostEqual(self.player.body.x,
                               300.0 - PLAYER_MOVE_SPEED * ACCELERATION_STEP)

    def test_diagonal(self):
        self.player.direction = Direction(down=True, right=True)
        physics.step(self.player)
        self.assertGreater(self.player.body.x, 300.0)
        self.assertGreater(self.player.body.y, 200.0)

    def test_opposite_flags_cancel(self):
        self.player.direction = Direction(left=True, right=True)
        physics.step(self.player)
        self.assertAlmostEqual(self.player.body.x, 300.0)

    def test_no_movement_from_rest(self):
        physics.step(self.player)
        self.assertEqual((self.player.body.x, self.player.body.y),
                         (300.0, 200.0))
        self.assertEqual(self.player.acceleration, 0.0)

    def test_acceleration_caps(self):
        self.player.direction = Direction(right=True)
        for _ in range(50):
            physics.step(self.player)
        self.assertAlmostEqual(self.player.acceleration, ACCELERATION_MAX)

    def test_friction_glides_along_last_direction(self):
        self.player.direction = Direction(right=True)
        for _ in range(5):
            physics.step(self.player)
        self.player.direction = Direction()
        x_before = self.player.body.x
        physics.step(self.player)
        self.assertGreater(self.player.body.x, x_before)
        self.assertEqual(self.player.last_direction, Direction(right=True))

    def test_glide_stops_at_floor(self):
        self.player.direction = Direction(right=True)
        for _ in range(3):
            physics.step(self.player)
        self.player.direction = Direction()
        for _ in range(20):
            physics.step(self.player)
        x_rest = self.player.body.x
        physics.step(self.player)
        self.assertEqual(self.player.body.x, x_rest)
        self.assertEqual(self.player.acceleration, 0.0)

    def test_last_direction_is_a_copy(self):
        self.player.direction = Direction(up=True)
        physics.step(self.player)
        self.player.direction.up = False
        self.assertTrue(self.player.last_direction.up)

    def test_wraps_right_edge(self):
        self.player.body.x = SCREEN_WIDTH - 0.5
        self.player.acceleration = ACCELERATION_MAX
        self.player.direction = Direction(right=True)
        physics.step(self.player)
        self.assertGreaterEqual(self.player.body.x, 0.0)
        self.assertLess(self.player.body.x, PLAYER_MOVE_SPEED)

    def test_wraps_top_edge(self):
        self.player.body.y = 0.5
        self.player.acceleration = ACCELERATION_MAX
        self.player.direction = Direction(up=True)
        physics.step(self.player)
        self.assertGreater(self.player.body.y, SCREEN_HEIGHT - PLAYER_MOVE_SPEED)
        self.assertLess(self.player.body.y, SCREEN_HEIGHT)

    def test_animation_frame_cycles_while_moving(self):
        self.player.direction = Direction(right=True)
        frames = []
        for _ in range(5):
            physics.step(self.player)
            frames.append(self.player.animation_frame)
        self.assertEqual(frames, [1, 2, 3, 0, 1])
        self.player.direction = Direction()
        physics.step(self.player)
        self.assertEqual(self.player.animation_frame, 0)

    def test_modulo_negative(self):
        self.assertAlmostEqual(physics.modulo(-5.0, 640.0), 635.0)
        self.assertAlmostEqual(physics.modulo(645.0, 640.0), 5.0)


class TestJump(unittest.TestCase):

    def setUp(self):
        self.player = Player('Fred')

    def test_full_cycle(self):
        physics.start_jump(self.player)
        offsets = []
        for _ in range(500):
            physics.step(self.player)
            offsets.append(self.player.jump.offset)
            if not self.player.jump.jumping:
                break
        self.assertFalse(self.player.jump.jumping)
        self.assertEqual(self.player.jump.offset, 0.0)
        self.assertAlmostEqual(max(offsets), JUMP_HEIGHT)

    def test_ease_out_on_the_way_up(self):
        physics.start_jump(self.player)
        physics.advance_jump(self.player)
        first = self.player.jump.offset
        physics.advance_jump(self.player)
        second = self.player.jump.offset - first
        self.assertLess(second, first)

    def test_jump_does_not_move_horizontally(self):
        x, y = self.player.body.x, self.player.body.y
        physics.start_jump(self.player)
        for _ in range(10):
            physics.step(self.player)
        self.assertEqual((self.player.body.x, self.player.body.y), (x, y))

    def test_start_while_jumping_is_ignored(self):
        physics.start_jump(self.player)
        for _ in range(3):
            physics.advance_jump(self.player)
        offset = self.player.jump.offset
        physics.start_jump(self.player)
        self.assertEqual(self.player.jump.offset, offset)


class TestPickup(unittest.TestCase):

    def test_overlap_sets_ate(self):
        player = Player('Fred', Rect(100.0, 100.0))
        potion = Potion(Rect(110, 110, 16, 16), PotionType.HEALTH)
        self.assertTrue(physics.step(player, potion))
        self.assertIs(player.ate, potion)

    def test_no_overlap(self):
        player = Player('Fred', Rect(100.0, 100.0))
        potion = Potion(Rect(400, 400, 16, 16), PotionType.MANA)
        self.assertFalse(physics.step(player, potion))
        self.assertIsNone(player.ate)

    def test_no_potion(self):
        self.assertFalse(physics.step(Player('Fred')))

    def test_stats_untouched(self):
        player = Player('Fred', Rect(100.0, 100.0))
        physics.step(player, Potion(Rect(110, 110, 16, 16)))
        self.assertEqual((player.hp, player.mp, player.str), (100, 30, 10))


if __name__ == '__main__':
    unittest.main()
