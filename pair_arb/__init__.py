"""ETF/FUTURE pair-arbitrage autotrader core.

Quick start:
    from pair_arb import AutoTrader, EngineConfig, LoggingGateway

    trader = AutoTrader(LoggingGateway(), EngineConfig(lot_size=10))
    # Wire the venue callbacks to trader.on_order_book_update,
    # trader.on_trade_ticks, trader.on_order_filled, ... and trade.
"""

from .book import BookSnapshot, Instrument, Lifespan, Side, UpdateKind
from .config import EngineConfig
from .engine import AutoTrader, MarketDataDispatcher, log_positions
from .gateway import Gateway, LoggingGateway
from .ledger import PositionLedger
from .orders import OrderLifecycleManager
from .replay import load_feed, replay_feed
from .rolling import PriceWindow, RollingStatisticsTracker, mean_and_stddev
from .signals import SignalEvaluator, SignalState, classify_spread
from .state import ActiveOrder, EngineState, OrderState

__all__ = [
    "ActiveOrder",
    "AutoTrader",
    "BookSnapshot",
    "EngineConfig",
    "EngineState",
    "Gateway",
    "Instrument",
    "Lifespan",
    "LoggingGateway",
    "MarketDataDispatcher",
    "OrderLifecycleManager",
    "OrderState",
    "PositionLedger",
    "PriceWindow",
    "RollingStatisticsTracker",
    "Side",
    "SignalEvaluator",
    "SignalState",
    "UpdateKind",
    "classify_spread",
    "load_feed",
    "log_positions",
    "mean_and_stddev",
    "replay_feed",
]
