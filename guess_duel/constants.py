"""Client constants: display, colors and protocol defaults."""


# Display settings
WINDOW_WIDTH = 800
WINDOW_HEIGHT = 560
FPS = 30

# Colors
COLOR_BG = (30, 30, 40)
COLOR_TEXT = (240, 240, 240)
COLOR_TEXT_DIM = (160, 160, 175)
COLOR_STATUS_INFO = (240, 240, 240)
COLOR_STATUS_WIN = (100, 200, 100)
COLOR_STATUS_LOSE = (200, 90, 90)
COLOR_STATUS_ERROR = (230, 170, 60)
COLOR_PROMPT = (230, 170, 60)

# Status line colors keyed by tone
TONE_COLORS = {
    'info': COLOR_STATUS_INFO,
    'win': COLOR_STATUS_WIN,
    'lose': COLOR_STATUS_LOSE,
    'error': COLOR_STATUS_ERROR,
}

# Seconds a validation prompt stays on screen
PROMPT_DURATION = 3.0

# Lobby server
DEFAULT_SERVER_ADDRESS = "http://localhost:8080"
MATCH_PATH = "/match"
MATCH_CONNECT_TIMEOUT = 10.0
# Lobby holds a waiting player for up to 180s between lines
MATCH_READ_TIMEOUT = 200.0
MATCH_CHUNK_SIZE = 1024

# Duel rules as enforced client-side
GUESS_MIN = 1
GUESS_MAX = 100
DEFAULT_RANGE = (GUESS_MIN, GUESS_MAX)

# Pause between "opponent found" and opening the duel connection
CONNECT_DELAY = 1.0
WS_OPEN_TIMEOUT = 10.0

# Supported UI / protocol languages
LANGUAGES = ('en', 'zh')
DEFAULT_LANGUAGE = 'en'
