"""Spread signal: is the ETF rich or cheap against the future right now?"""

from enum import Enum
from typing import Optional

from .rolling import RollingStatisticsTracker


class SignalState(Enum):
    ETF_RICH = "ETF_RICH"          # sell ETF, buy future
    FUTURE_RICH = "FUTURE_RICH"    # buy ETF, sell future
    NEUTRAL = "NEUTRAL"


def classify_spread(
    newest: Optional[float],
    mean: Optional[float],
    stddev: Optional[float],
    z_threshold: float = 1.0,
) -> SignalState:
    """Classify the newest spread sample against its trailing band.

    ETF_RICH above mean + z·stddev, FUTURE_RICH below mean − z·stddev,
    NEUTRAL inside the band or when the statistics are undefined.
    """
    if newest is None or mean is None or stddev is None:
        return SignalState.NEUTRAL
    band = z_threshold * stddev
    if newest > mean + band:
        return SignalState.ETF_RICH
    if newest < mean - band:
        return SignalState.FUTURE_RICH
    return SignalState.NEUTRAL


class SignalEvaluator:
    """Binds the z threshold; holds no state between calls."""

    def __init__(self, z_threshold: float = 1.0):
        if z_threshold < 0:
            raise ValueError("z_threshold must be non-negative")
        self.z_threshold = float(z_threshold)

    def classify(
        self,
        newest: Optional[float],
        mean: Optional[float],
        stddev: Optional[float],
    ) -> SignalState:
        return classify_spread(newest, mean, stddev, self.z_threshold)

    def evaluate(self, tracker: RollingStatisticsTracker) -> SignalState:
        return self.classify(*tracker.spread_statistics())
