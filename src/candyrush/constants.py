GRID_ROWS = 8
GRID_COLS = 8
BOTTOM_MARGIN = 20

# Board maximum footprint relative to window (percentage of window width/height).
BOARD_MAX_WIDTH_PCT = 0.75
BOARD_MAX_HEIGHT_PCT = 0.85

# Height reserved above the board for score/moves/goal text.
HUD_HEIGHT = 72

# Scoring
POINTS_PER_TILE = 100
TILES_PER_MATCH = 3
MIN_RUN_LENGTH = 3

# Star thresholds shown on the win screen, highest first.
STAR_THRESHOLDS = ((10000, 3), (5000, 2))

# Level defaults
DEFAULT_MOVES = 20
DEFAULT_TIME_LIMIT = 120.0
DEFAULT_GOAL = 10
SAME_COLOR_SPAWN_CHANCE = 0.4
DIFFERENT_COLOR_SPAWN_CHANCE = 0.6
MAX_BUILD_ATTEMPTS = 500

# Pacing (seconds); zero collapses the wait and resolves synchronously.
SWAP_DELAY = 0.2
PASS_DELAY = 1.0
