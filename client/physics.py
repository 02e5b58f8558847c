"""
Local simulation run on every render tick: acceleration, movement,
jumping and potion pickup. No network access happens here.
"""

from common.config import (
    SCREEN_WIDTH, SCREEN_HEIGHT, PLAYER_MOVE_SPEED,
    ACCELERATION_STEP, FRICTION, ACCELERATION_MAX, ACCELERATION_MIN,
    JUMP_HEIGHT, JUMP_SPEED, JUMP_MIN_STEP, ANIMATION_FRAMES
)
from common.models import Player, Potion


def modulo(value: float, n: float) -> float:
    """Modulus that stays non-negative for negative values."""
    return (value % n + n) % n


def start_jump(player: Player):
    """Begin a jump unless one is already in progress."""
    if not player.jump.jumping:
        player.jump.jumping = True
        player.jump.ascending = True
        player.jump.offset = 0.0


def advance_jump(player: Player):
    """
    Move one step through the jump cycle.

    The step shrinks near the peak, so the ascent eases out and the
    descent eases in.
    """
    jump = player.jump
    if not jump.jumping:
        return

    step = max(JUMP_MIN_STEP, JUMP_SPEED * (1.0 - jump.offset / JUMP_HEIGHT))
    if jump.ascending:
        jump.offset += step
        if jump.offset >= JUMP_HEIGHT:
            jump.offset = JUMP_HEIGHT
            jump.ascending = False
    else:
        jump.offset -= step
        if jump.offset <= 0.0:
            jump.offset = 0.0
            jump.ascending = True
            jump.jumping = False


def update_acceleration(player: Player) -> bool:
    """Ramp acceleration up while input is held, apply friction otherwise.

    Returns True if the player is actively moving this tick.
    """
    moving = player.direction.any()
    if moving:
        player.last_direction = player.direction.copy()
        player.acceleration = min(ACCELERATION_MAX,
                                  player.acceleration + ACCELERATION_STEP)
    else:
        player.acceleration = max(ACCELERATION_MIN,
                                  player.acceleration - FRICTION)
    return moving


def move(player: Player, moving: bool):
    """Displace the body along the held (or, while gliding, last) direction."""
    heading = player.direction if moving else player.last_direction
    distance = PLAYER_MOVE_SPEED * player.acceleration
    if distance <= 0.0:
        return

    body = player.body
    if heading.up:
        body.y -= distance
    if heading.down:
        body.y += distance
    if heading.left:
        body.x -= distance
    if heading.right:
        body.x += distance

    # Wrap around the screen edges
    body.x = modulo(body.x, float(SCREEN_WIDTH))
    body.y = modulo(body.y, float(SCREEN_HEIGHT))


def check_pickup(player: Player, potion: Potion) -> bool:
    """Record the potion in ``player.ate`` if the bodies overlap."""
    if potion is not None and player.body.overlaps(potion.position):
        player.ate = potion
        return True
    return False


def step(player: Player, potion: Potion = None) -> bool:
    """
    Advance *player* by one render tick.

    Returns True if the player overlapped *potion* during this tick.
    """
    moving = update_acceleration(player)
    move(player, moving)
    advance_jump(player)

    if moving:
        player.animation_frame = (player.animation_frame + 1) % ANIMATION_FRAMES
    else:
        player.animation_frame = 0

    return check_pickup(player, potion)
