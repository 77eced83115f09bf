import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

# Load variables from .env in the project root (one level up from this file)
_env_path = Path(__file__).parent.parent / ".env"
load_dotenv(_env_path)


def _env_flag(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# --- Order sizing / risk ---
LOT_SIZE = int(os.environ.get("ARB_LOT_SIZE", 10))              # max lots per order
POSITION_LIMIT = int(os.environ.get("ARB_POSITION_LIMIT", 100))  # |position| cap per instrument

# Count unfilled volume against the limit at send time. Off by default:
# positions only move on confirmed fills.
RESERVE_ON_SEND = _env_flag("ARB_RESERVE_ON_SEND", False)

# --- Prices (minor currency units) ---
TICK_SIZE = int(os.environ.get("ARB_TICK_SIZE", 100))
MINIMUM_BID = int(os.environ.get("ARB_MINIMUM_BID", 1))
MAXIMUM_ASK = int(os.environ.get("ARB_MAXIMUM_ASK", 2**31 - 1))

# --- Signal ---
Z_THRESHOLD = float(os.environ.get("ARB_Z_THRESHOLD", 1.0))     # entry band in std-devs
WINDOW_LENGTH = int(os.environ.get("ARB_WINDOW_LENGTH", 30))    # rolling lookback


@dataclass(frozen=True)
class EngineConfig:
    """Tunables for one engine instance.

    Defaults come from the environment (see module constants above), so a
    `.env` file is enough to retune a deployment; tests pass values directly.
    """
    lot_size:        int   = LOT_SIZE
    position_limit:  int   = POSITION_LIMIT
    tick_size:       int   = TICK_SIZE
    z_threshold:     float = Z_THRESHOLD
    window_length:   int   = WINDOW_LENGTH
    minimum_bid:     int   = MINIMUM_BID
    maximum_ask:     int   = MAXIMUM_ASK
    reserve_on_send: bool  = RESERVE_ON_SEND

    def __post_init__(self) -> None:
        if self.lot_size <= 0:
            raise ValueError("lot_size must be positive")
        if self.position_limit <= 0:
            raise ValueError("position_limit must be positive")
        if self.tick_size <= 0:
            raise ValueError("tick_size must be positive")
        if self.window_length < 2:
            raise ValueError("window_length must be at least 2")
        if self.z_threshold < 0:
            raise ValueError("z_threshold must be non-negative")
        if not 0 < self.minimum_bid < self.maximum_ask:
            raise ValueError("need 0 < minimum_bid < maximum_ask")

    @property
    def min_bid_nearest_tick(self) -> int:
        """Lowest bid price that sits on a tick."""
        return (self.minimum_bid + self.tick_size) // self.tick_size * self.tick_size

    @property
    def max_ask_nearest_tick(self) -> int:
        """Highest ask price that sits on a tick."""
        return self.maximum_ask // self.tick_size * self.tick_size
