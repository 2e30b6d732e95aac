GRID_ROWS = 8
GRID_COLS = 8

# Gem palette (color id -> RGB). Order matters: color_count picks the first N.
GEM_COLORS = {
    'red':    (231, 76, 60),    # #E74C3C
    'blue':   (52, 152, 219),   # #3498DB
    'green':  (46, 204, 113),   # #2ECC71
    'orange': (243, 156, 18),   # #F39C12
    'purple': (155, 89, 182),   # #9B59B6
    'teal':   (26, 188, 156),   # #1ABC9C
}
DEFAULT_COLOR_COUNT = 6
# Fewer colors than this cannot always avoid an immediate triple.
MIN_COLOR_COUNT = 3

# Scoring: matched cells x BASE_MATCH_VALUE x chain depth.
BASE_MATCH_VALUE = 10
MIN_MATCH_LENGTH = 3

# Level progression
INITIAL_TARGET_SCORE = 1000
TARGET_SCORE_GROWTH = 1.5

# Safety caps for loops that should finish long before reaching them.
MAX_CASCADE_STEPS = 100
MAX_RESHUFFLE_ATTEMPTS = 200

# Arcade uses 4 for the right mouse button (arcade.MOUSE_BUTTON_RIGHT)
MOUSE_BUTTON_RIGHT = 4
