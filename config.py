# config.py
"""
Configuration for the outfit recommendation engine.
All values can be overridden via environment variables (or a .env file).
"""
import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# ============================================================================
# Helper Functions
# ============================================================================
def env_float(name: str, default: float) -> float:
    """
    Read a float setting, falling back to the default when unset or malformed.

    Args:
        name: Environment variable name
        default: Value used when the variable is missing or not a number

    Returns:
        The parsed float
    """
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def env_int(name: str, default: int) -> int:
    """Read an integer setting, falling back to the default when unset or malformed."""
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default

# ============================================================================
# Infrastructure Configuration
# ============================================================================
REDIS_URL = os.environ.get("REDIS_URL", "redis://localhost:6379/0")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# ============================================================================
# Outfit History (repeat avoidance across sessions)
# ============================================================================
HISTORY_BACKEND = os.environ.get("HISTORY_BACKEND", "memory").lower()  # memory/redis
HISTORY_NAMESPACE = os.environ.get("HISTORY_NAMESPACE", "outfits:recent")
RECENT_OUTFITS_TTL_DAYS = env_float("RECENT_OUTFITS_TTL_DAYS", 7.0)

# ============================================================================
# Generation Defaults
# ============================================================================
DEFAULT_MAX_RESULTS = env_int("DEFAULT_MAX_RESULTS", 5)
DEFAULT_MIN_SCORE = env_float("DEFAULT_MIN_SCORE", 0.1)
MAX_COMBINATIONS = env_int("MAX_COMBINATIONS", 1000)  # Enumeration cap per run

# Similarity thresholds
VARIETY_SIMILARITY_THRESHOLD = env_float("VARIETY_SIMILARITY_THRESHOLD", 0.7)  # Within one result set
HISTORY_SIMILARITY_THRESHOLD = env_float("HISTORY_SIMILARITY_THRESHOLD", 0.8)  # Against recent outfits
