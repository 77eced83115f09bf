"""ETF/FUTURE pair-arbitrage autotrader: callback facade and dispatcher.

Architecture:
  - The venue gateway delivers one event at a time and calls the AutoTrader
    callbacks below; each runs to completion before the next arrives, so no
    locking is needed.
  - Book updates and trade ticks both go through
    MarketDataDispatcher.on_market_update(): snapshot → midprice window →
    spread sample → signal → pair trade.
  - Fills, status updates and errors go straight to the
    OrderLifecycleManager.
  - No callback ever raises back into the gateway; failures are logged.
"""

import logging
from typing import Optional, Sequence

from .book import BookSnapshot, Instrument, UpdateKind
from .config import EngineConfig
from .gateway import Gateway
from .orders import OrderLifecycleManager
from .signals import SignalEvaluator, SignalState
from .state import EngineState

log = logging.getLogger(__name__)


def log_positions(state: EngineState, level: int = logging.DEBUG) -> None:
    """Dump positions and both top-of-book snapshots to the log."""
    if not log.isEnabledFor(level):
        return
    ledger = state.ledger
    log.log(
        level,
        "ETF pos %+d  FUTURE pos %+d  active orders %d  signal %s",
        ledger.position(Instrument.ETF),
        ledger.position(Instrument.FUTURE),
        len(state.active_orders),
        state.signal.value,
    )
    for inst in (Instrument.ETF, Instrument.FUTURE):
        snap = state.snapshots.get(inst)
        if snap is None:
            continue
        log.log(
            level,
            "%-6s bids %s  asks %s",
            inst.name,
            " | ".join(str(p) for p in snap.bid_prices),
            " | ".join(str(p) for p in snap.ask_prices),
        )


class MarketDataDispatcher:
    """Shared handler for both market-data streams."""

    def __init__(
        self,
        state: EngineState,
        evaluator: SignalEvaluator,
        orders: OrderLifecycleManager,
    ) -> None:
        self.state = state
        self.evaluator = evaluator
        self.orders = orders

    def on_market_update(
        self,
        kind: UpdateKind,
        instrument: Instrument,
        sequence_number: int,
        ask_prices: Sequence[int],
        ask_volumes: Sequence[int],
        bid_prices: Sequence[int],
        bid_volumes: Sequence[int],
    ) -> Optional[SignalState]:
        """Process one update; returns the signal if a spread cycle ran.

        Flow:
          1. Drop duplicate / out-of-order sequence numbers per stream.
          2. Overwrite the instrument's latest snapshot.
          3. Record the midprice once both sides of that book are quoted.
          4. With a midprice on both instruments, append a spread sample,
             classify it, and hand any live signal to the order manager.
        """
        kind, instrument = UpdateKind(kind), Instrument(instrument)
        state = self.state

        key = (kind, instrument)
        last = state.last_sequence.get(key)
        if last is not None and sequence_number <= last:
            log.debug(
                "Stale %s update for %s: seq %d <= %d, ignored",
                kind.name, instrument.name, sequence_number, last,
            )
            return None

        snap = BookSnapshot.from_arrays(
            instrument, sequence_number, ask_prices, ask_volumes, bid_prices, bid_volumes,
        )
        state.last_sequence[key] = sequence_number
        state.snapshots[instrument] = snap
        log.debug(
            "%s received for %s: ask %d x %d; bid %d x %d",
            kind.name, instrument.name,
            snap.best_ask, snap.best_ask_volume, snap.best_bid, snap.best_bid_volume,
        )

        mid = snap.midprice
        if mid is None:
            return None
        state.tracker.record(instrument, mid)

        if not state.tracker.has_both():
            return None

        state.tracker.append_spread()
        signal = self.evaluator.evaluate(state.tracker)
        state.signal = signal
        log_positions(state)

        if signal is not SignalState.NEUTRAL:
            placed = self.orders.place_pair_trade(signal)
            if placed:
                log.info(
                    "%s: spread %.1f  →  %s",
                    signal.value,
                    state.tracker.newest_spread,
                    ", ".join(f"{o.side.name} {o.volume} {o.instrument.name} @ {o.price}" for o in placed),
                )
                log_positions(state, logging.INFO)
        return signal


class AutoTrader:
    """Inbound callback surface the venue gateway drives.

    Args:
        gateway: Outbound order interface (see `gateway.Gateway`).
        config:  Tunables; defaults are read from the environment.
    """

    def __init__(self, gateway: Gateway, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.gateway = gateway
        self.state = EngineState.initial(self.config)
        self.evaluator = SignalEvaluator(self.config.z_threshold)
        self.orders = OrderLifecycleManager(self.state, gateway)
        self.dispatcher = MarketDataDispatcher(self.state, self.evaluator, self.orders)

    # ── Market data ────────────────────────────────────────────────────────

    def on_order_book_update(
        self,
        instrument: int,
        sequence_number: int,
        ask_prices: Sequence[int],
        ask_volumes: Sequence[int],
        bid_prices: Sequence[int],
        bid_volumes: Sequence[int],
    ) -> None:
        try:
            self.dispatcher.on_market_update(
                UpdateKind.ORDER_BOOK, instrument, sequence_number,
                ask_prices, ask_volumes, bid_prices, bid_volumes,
            )
        except Exception:
            log.exception("Order book update failed (instrument %s, seq %s)", instrument, sequence_number)

    def on_trade_ticks(
        self,
        instrument: int,
        sequence_number: int,
        ask_prices: Sequence[int],
        ask_volumes: Sequence[int],
        bid_prices: Sequence[int],
        bid_volumes: Sequence[int],
    ) -> None:
        try:
            self.dispatcher.on_market_update(
                UpdateKind.TRADE_TICKS, instrument, sequence_number,
                ask_prices, ask_volumes, bid_prices, bid_volumes,
            )
        except Exception:
            log.exception("Trade ticks failed (instrument %s, seq %s)", instrument, sequence_number)

    # ── Order events ───────────────────────────────────────────────────────

    def on_order_filled(self, client_order_id: int, price: int, volume: int) -> None:
        try:
            self.orders.on_order_filled(client_order_id, price, volume)
        except Exception:
            log.exception("Order fill handling failed for %d", client_order_id)

    def on_order_status(
        self,
        client_order_id: int,
        fill_volume: int,
        remaining_volume: int,
        fees: int,
    ) -> None:
        try:
            self.orders.on_order_status(client_order_id, fill_volume, remaining_volume, fees)
        except Exception:
            log.exception("Order status handling failed for %d", client_order_id)

    def on_hedge_filled(self, client_order_id: int, price: int, volume: int) -> None:
        try:
            self.orders.on_hedge_filled(client_order_id, price, volume)
        except Exception:
            log.exception("Hedge fill handling failed for %d", client_order_id)

    def on_error(self, client_order_id: int, message: str) -> None:
        try:
            self.orders.on_error(client_order_id, message)
        except Exception:
            log.exception("Error handling failed for %d", client_order_id)

    def on_disconnect(self) -> None:
        self.state.disconnected = True
        log.warning(
            "execution connection lost; no further orders (%d left open at the venue)",
            len(self.state.active_orders),
        )
        self.log_positions(logging.WARNING)

    # ── Helpers ────────────────────────────────────────────────────────────

    def log_positions(self, level: int = logging.INFO) -> None:
        log_positions(self.state, level)

    def position(self, instrument: Instrument) -> int:
        return self.state.ledger.position(instrument)
