"""
Minimal game renderer using pygame.
Draws both players and the session potion as rectangles with a HUD,
and maps the keyboard onto direction flags and the jump trigger.
"""

try:
    import pygame
    PYGAME_AVAILABLE = True
except ImportError:
    PYGAME_AVAILABLE = False

from common.config import SCREEN_WIDTH, SCREEN_HEIGHT
from common.models import Direction, PotionType


BACKGROUND = (0, 128, 0)
LOCAL_COLOR = (255, 128, 0)
OPPONENT_COLOR = (80, 80, 255)
POTION_COLORS = {
    PotionType.HEALTH: (220, 40, 40),
    PotionType.MANA: (40, 40, 220),
}
HUD_HEIGHT = 32


class GameRenderer:
    """Pygame-based renderer for the duel client."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        if not PYGAME_AVAILABLE:
            print("[RENDERER] pygame not available — running headless")
            self.headless = True
            return

        self.headless = False
        pygame.init()
        self.width = width
        self.height = height
        self.screen = pygame.display.set_mode((width, height))
        pygame.display.set_caption("Player!")
        self.font = pygame.font.SysFont('monospace', 14)
        self.big_font = pygame.font.SysFont('monospace', 20, bold=True)
        self.clock = pygame.time.Clock()

    def render(self, local, opponent, potion, waiting: bool, metrics: dict):
        """Render one frame."""
        if self.headless:
            return

        self.screen.fill(BACKGROUND)

        if potion is not None:
            p = potion.position
            pygame.draw.rect(self.screen, POTION_COLORS[potion.potion_type],
                             (int(p.x), int(p.y), int(p.w), int(p.h)))

        if not waiting:
            self._draw_player(opponent, OPPONENT_COLOR)
        self._draw_player(local, LOCAL_COLOR)

        self._draw_hud(local, waiting, metrics)

        pygame.display.flip()
        self.clock.tick(60)

    def _draw_player(self, player, color):
        b = player.body
        rect = pygame.Rect(int(b.x), int(b.y - player.jump.offset),
                           int(b.w), int(b.h))
        pygame.draw.rect(self.screen, color, rect)

        # Facing marker: idle players keep facing their last direction
        facing = player.direction if player.direction.any() else player.last_direction
        cx, cy = rect.center
        if facing.left:
            cx = rect.left + 4
        if facing.right:
            cx = rect.right - 4
        if facing.up:
            cy = rect.top + 4
        if facing.down:
            cy = rect.bottom - 4
        shade = 255 if player.animation_frame % 2 == 0 else 180
        pygame.draw.circle(self.screen, (shade, shade, shade), (cx, cy), 3)

        label = self.font.render(player.name, True, (255, 255, 255))
        self.screen.blit(label, (rect.left, rect.top - 16))

    def _draw_hud(self, local, waiting: bool, metrics: dict):
        """Draw top bar with player stats and network metrics."""
        pygame.draw.rect(self.screen, (0, 0, 0), (0, 0, self.width, HUD_HEIGHT))
        text = f"Player: {local.name}  HP {local.hp}  MP {local.mp}"
        self.screen.blit(self.big_font.render(text, True, (255, 255, 255)), (6, 6))

        y = HUD_HEIGHT + 4
        for key, val in metrics.items():
            label = self.font.render(f"{key}: {val}", True, (200, 200, 200))
            self.screen.blit(label, (self.width - 170, y))
            y += 18

        if waiting:
            msg = self.big_font.render("Waiting for opponent...", True,
                                       (255, 255, 255))
            self.screen.blit(msg, (self.width // 2 - msg.get_width() // 2,
                                   self.height // 2))

    def get_input(self) -> tuple:
        """Read the keyboard. Returns (Direction, jump_pressed)."""
        if self.headless:
            return Direction(), False

        keys = pygame.key.get_pressed()
        direction = Direction(
            up=bool(keys[pygame.K_UP]),
            down=bool(keys[pygame.K_DOWN]),
            left=bool(keys[pygame.K_LEFT]),
            right=bool(keys[pygame.K_RIGHT]),
        )
        return direction, bool(keys[pygame.K_SPACE])

    def check_quit(self) -> bool:
        """Check if user wants to quit."""
        if self.headless:
            return False

        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return True
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return True
        return False

    def close(self):
        if not self.headless:
            pygame.quit()
