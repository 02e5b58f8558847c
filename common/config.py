"""
Game constants and configuration.
"""

# Screen bounds
SCREEN_WIDTH = 640
SCREEN_HEIGHT = 480

# Sessions
MAX_PLAYERS = 2
SESSION_TTL = 60.0          # Seconds a completed session is kept around
GC_INTERVAL = 1.0           # Minimum seconds between garbage collections

# Player
PLAYER_WIDTH = 34
PLAYER_HEIGHT = 44
PLAYER_MAX_HP = 100
PLAYER_MAX_MP = 30
PLAYER_MAX_STR = 10
SPAWN_POINTS = [(100.0, 100.0), (480.0, 100.0)]
MAX_NAME_LENGTH = 32        # Characters; a full session must fit one datagram

# Physics (per render tick)
PLAYER_MOVE_SPEED = 10.0
ACCELERATION_STEP = 0.1
FRICTION = 0.1
ACCELERATION_MAX = 1.0
ACCELERATION_MIN = 0.0
JUMP_HEIGHT = 40.0
JUMP_SPEED = 8.0
JUMP_MIN_STEP = 1.0
ANIMATION_FRAMES = 4

# Potions
POTION_SIZE = 16

# Network defaults
DEFAULT_HOST = '0.0.0.0'
DEFAULT_PORT = 9000
DEFAULT_BUFFER_SIZE = 65535

# Timeouts
SERVER_RECV_TIMEOUT = 0.5   # Server loop wakes at least this often
CLIENT_RECV_TIMEOUT = 0.25  # Bounded wait for a reply before giving up

# Client cadences (seconds)
RENDER_TICK = 0.033
NETWORK_TICK = 0.020
WAITING_POLL_INTERVAL = 0.5
