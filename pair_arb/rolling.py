"""Rolling midprice windows and spread statistics."""

import logging
from collections import deque
from typing import Iterable, Optional

import numpy as np

from .book import Instrument

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# PriceWindow
# ---------------------------------------------------------------------------

class PriceWindow:
    """Fixed-capacity FIFO window of midprices, oldest evicted first."""

    def __init__(self, n: int = 30):
        if n <= 0:
            raise ValueError("window capacity must be positive")
        self.n = int(n)
        self._x: deque[float] = deque(maxlen=self.n)

    def add(self, v: float) -> None:
        self._x.append(float(v))

    @property
    def latest(self) -> Optional[float]:
        return self._x[-1] if self._x else None

    def values(self) -> list[float]:
        return list(self._x)

    def __len__(self) -> int:
        return len(self._x)


# ---------------------------------------------------------------------------
# Statistics helpers
# ---------------------------------------------------------------------------

def mean_and_stddev(samples: Iterable[float]) -> tuple[Optional[float], Optional[float]]:
    """Arithmetic mean and population std-dev, or (None, None) below 2 samples.

    Mean first, then deviations, then sqrt(mean squared deviation), all in
    float64 so a tight spread never collapses to a zero deviation.
    """
    arr = np.asarray(list(samples), dtype=float)
    if arr.size < 2:
        return None, None
    mu = float(arr.mean())
    dev = arr - mu
    sd = float(np.sqrt(np.mean(dev * dev)))
    return mu, sd


class RollingStatisticsTracker:
    """Per-instrument midprice windows plus the ETF − FUTURE spread history.

    The spread buffer holds the newest sample and up to `window_length`
    samples before it; the statistics describe only those older samples so
    the newest one can be compared against them.
    """

    def __init__(self, window_length: int = 30):
        if window_length < 2:
            raise ValueError("window_length must be at least 2")
        self.window_length = int(window_length)
        self._windows: dict[Instrument, PriceWindow] = {
            inst: PriceWindow(self.window_length) for inst in Instrument
        }
        self._spreads: deque[float] = deque(maxlen=self.window_length + 1)
        self.spread_count: int = 0

    # ── midprices ──────────────────────────────────────────────────────────

    def record(self, instrument: Instrument, midprice: float) -> None:
        self._windows[Instrument(instrument)].add(midprice)

    def window(self, instrument: Instrument) -> PriceWindow:
        return self._windows[Instrument(instrument)]

    def latest(self, instrument: Instrument) -> Optional[float]:
        return self._windows[Instrument(instrument)].latest

    def has_both(self) -> bool:
        return all(len(w) > 0 for w in self._windows.values())

    # ── spread ─────────────────────────────────────────────────────────────

    def append_spread(self) -> Optional[float]:
        """Append latest ETF mid − latest FUTURE mid; None if either is missing."""
        etf = self.latest(Instrument.ETF)
        ftr = self.latest(Instrument.FUTURE)
        if etf is None or ftr is None:
            return None
        spread = etf - ftr
        self._spreads.append(spread)
        self.spread_count += 1
        return spread

    @property
    def newest_spread(self) -> Optional[float]:
        return self._spreads[-1] if self._spreads else None

    def history(self) -> list[float]:
        """Spread samples before the newest one, oldest first."""
        return list(self._spreads)[:-1]

    def spread_mean(self) -> Optional[float]:
        return mean_and_stddev(self.history())[0]

    def spread_stddev(self) -> Optional[float]:
        return mean_and_stddev(self.history())[1]

    def spread_statistics(self) -> tuple[Optional[float], Optional[float], Optional[float]]:
        """Return (newest, mean, stddev) in one pass over the history."""
        mu, sd = mean_and_stddev(self.history())
        return self.newest_spread, mu, sd
