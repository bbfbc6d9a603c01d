#all magic numbers & default settings
from pathlib import Path

CONFIG_ENV_VAR = "YTX_CONFIG"
CONFIG_FILE = Path.home() / ".ytx" / "config.json"

DEFAULT_LOCALE = "en-US"
DEFAULT_MAX_LINE_LENGTH = 40

DEFAULT_CONFIG = {
    "locale": None,  # None means detect from the video, then DEFAULT_LOCALE
    "format": "txt",
    "output_dir": "./output",
    "keep_audio": False,
    "video": False,
    # faster-whisper model settings
    "model": "small",
    "device": "auto",
    "compute_type": "default",
    "max_line_length": DEFAULT_MAX_LINE_LENGTH,
}

# Spinner
SPINNER_FRAMES = ["⠋", "⠙", "⠹", "⠸", "⠼", "⠴", "⠦", "⠧", "⠇", "⠏"]
SPINNER_INTERVAL = 0.08  # seconds per frame

# Progress bar
BAR_WIDTH = 25
BAR_FILLED = "█"
BAR_EMPTY = "░"
ELLIPSIS = "…"
FALLBACK_TERMINAL_WIDTH = 80

# Status glyphs
SUCCESS_GLYPH = "✓"
WARNING_GLYPH = "⚠"
INFO_PREFIX = "=>"

# Subprocess draining
READ_CHUNK_SIZE = 4096
DRAIN_TIMEOUT = 2.0  # upper bound for drainers to reach EOF after exit

# Transcription progress label length
PREVIEW_LABEL_LENGTH = 60
