"""Configuration constants and API key loading."""

import logging
import math
import os

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Load .env from the directory the tool is run from
load_dotenv()

# Pause detection
PAUSE_THRESHOLD_SEC = 0.75       # Gaps longer than this get shortened
TARGET_PAUSE_SEC = 0.4           # Shortened pauses keep this much audio
LEADING_SILENCE_MIN_SEC = 0.5    # Leading silence longer than this is removed
LEADING_SILENCE_KEEP_SEC = 0.1   # Pre-roll kept before the first word

# Filler detection
SENTENCE_BOUNDARY_GAP_SEC = 0.5  # Gap that marks the start of a new utterance
FILLER_PADDING_SEC = 0.05        # Padding added around each filler cut
MODEL_TIMESTAMP_DECIMALS = 2     # Timestamp precision sent to the language model

# Splicing
CROSSFADE_SEC = 0.03

# Voice leveling
TARGET_LOUDNESS_DBFS = -13.0
MAX_GAIN_DB = 4.0
LEVEL_WINDOW_SEC = 0.5
MIN_RMS_THRESHOLD = 0.001
SILENCE_FLOOR_DBFS = -100.0
HEADROOM = 0.95

# Gemini filler classification
GEMINI_API_URL = "https://generativelanguage.googleapis.com/v1beta/models"
GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
DEFAULT_GEMINI_TIMEOUT_SEC = 120.0

_API_KEY_ENV = "GEMINI_API_KEY"
_PLACEHOLDER = "paste-your-key"


def load_api_key() -> str | None:
    """
    Read the Gemini API key from the environment (or .env).

    Returns:
        The key, or None when it is unset, blank or still the placeholder.
    """
    key = os.getenv(_API_KEY_ENV, "").strip()
    if not key or _PLACEHOLDER in key:
        return None
    return key


def load_timeout() -> float:
    """
    Read the Gemini request timeout (seconds) from GEMINI_TIMEOUT_S.

    Unset, malformed or out-of-range values fall back to the default.
    """
    raw = os.getenv("GEMINI_TIMEOUT_S", "").strip()
    if not raw:
        return DEFAULT_GEMINI_TIMEOUT_SEC
    try:
        timeout = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid GEMINI_TIMEOUT_S=%r", raw)
        return DEFAULT_GEMINI_TIMEOUT_SEC
    if not (math.isfinite(timeout) and timeout > 0):
        logger.warning("Ignoring out-of-range GEMINI_TIMEOUT_S=%r", raw)
        return DEFAULT_GEMINI_TIMEOUT_SEC
    return timeout
