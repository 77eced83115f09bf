"""Order lifecycle: pair trades out, fills/status/errors back in.

Every order we send is registered in `EngineState.active_orders` before the
gateway call, and retired exactly once: when the venue reports zero remaining
volume, when an error references it, or (hedges only) once fully filled.
Nothing is ever resent.

Per-order state machine:
    PENDING ──ack──▶ OPEN ──fill──▶ PARTIALLY_FILLED
       │               │                  │
       └───────────────┴── remaining 0 ───┴──▶ CLOSED
"""

import logging
from typing import Optional

from .book import Instrument, Lifespan, Side
from .gateway import Gateway
from .signals import SignalState
from .state import ActiveOrder, EngineState, OrderState

log = logging.getLogger(__name__)


class OrderLifecycleManager:

    def __init__(self, state: EngineState, gateway: Gateway) -> None:
        self.state = state
        self.gateway = gateway

    # ── Outbound ───────────────────────────────────────────────────────────

    def place_pair_trade(self, signal: SignalState) -> list[ActiveOrder]:
        """Send an ETF insert plus an opposite FUTURE hedge for a live signal.

        ETF_RICH    => SELL ETF at its best bid, BUY FUTURE at its best ask
        FUTURE_RICH => BUY ETF at its best ask, SELL FUTURE at its best bid

        Each leg is sized min(lot size, displayed volume on the side it
        trades against). Returns the orders sent, empty if none.
        """
        if signal is SignalState.NEUTRAL:
            return []
        if self.state.disconnected:
            log.debug("Disconnected: ignoring %s signal", signal.value)
            return []

        etf = self.state.snapshots.get(Instrument.ETF)
        ftr = self.state.snapshots.get(Instrument.FUTURE)
        if etf is None or ftr is None:
            return []

        ledger = self.state.ledger
        if signal is SignalState.ETF_RICH:
            side, price = Side.SELL, etf.best_bid
            volume = ledger.order_volume(etf.best_bid_volume)
            hedge_side, hedge_price = Side.BUY, ftr.best_ask
            hedge_volume = ledger.order_volume(ftr.best_ask_volume)
        else:
            side, price = Side.BUY, etf.best_ask
            volume = ledger.order_volume(etf.best_ask_volume)
            hedge_side, hedge_price = Side.SELL, ftr.best_bid
            hedge_volume = ledger.order_volume(ftr.best_bid_volume)

        if price <= 0 or not ledger.can_trade(Instrument.ETF, side, volume):
            log.info(
                "%s: no room to %s %d ETF (pos %+d)",
                signal.value, side.name, volume, ledger.position(Instrument.ETF),
            )
            return []

        placed = [self._send_insert(side, price, volume, Lifespan.GOOD_FOR_DAY)]

        if hedge_price > 0 and ledger.can_trade(Instrument.FUTURE, hedge_side, hedge_volume):
            placed.append(self._send_hedge(hedge_side, hedge_price, hedge_volume, Lifespan.GOOD_FOR_DAY))
        else:
            log.warning(
                "%s: hedge leg skipped (%s %d FUTURE @ %d, pos %+d)",
                signal.value, hedge_side.name, hedge_volume, hedge_price,
                ledger.position(Instrument.FUTURE),
            )
        return placed

    def cancel_order(self, client_order_id: int) -> bool:
        """Ask the venue to cancel a resting insert; True if a cancel was sent."""
        order = self.state.active_orders.get(client_order_id)
        if order is None or order.is_hedge or order.is_closed:
            return False
        self.gateway.send_cancel_order(client_order_id)
        return True

    # ── Inbound ────────────────────────────────────────────────────────────

    def on_order_filled(self, client_order_id: int, price: int, volume: int) -> Optional[ActiveOrder]:
        """Book an insert-order fill and hedge it at the extreme admissible tick.

        Returns the hedge order sent, if any.
        """
        order = self.state.active_orders.get(client_order_id)
        if order is None or order.is_hedge:
            log.warning("Fill for unknown order %d (%d @ %d) ignored", client_order_id, volume, price)
            return None

        order.filled_volume += volume
        if order.remaining_volume > 0:
            order.state = OrderState.PARTIALLY_FILLED

        ledger = self.state.ledger
        pos = ledger.apply_fill(order.instrument, order.side, volume)
        log.info(
            "Fill: %s %s %d @ %d  |  position now %+d",
            order.instrument.name, order.side.name, volume, price, pos,
        )

        if self.state.disconnected:
            return None

        config = self.state.config
        hedge_side = order.side.opposite
        if hedge_side is Side.BUY:
            hedge_price = config.max_ask_nearest_tick
        else:
            hedge_price = config.min_bid_nearest_tick

        hedge_volume = min(volume, ledger.headroom(Instrument.FUTURE, hedge_side))
        if hedge_volume < volume:
            log.error(
                "Hedge for order %d capped at %d of %d by the FUTURE limit",
                client_order_id, hedge_volume, volume,
            )
        if hedge_volume <= 0:
            return None
        return self._send_hedge(hedge_side, hedge_price, hedge_volume, None)

    def on_hedge_filled(self, client_order_id: int, price: int, volume: int) -> None:
        """Mirror a hedge fill into the FUTURE position; never trades further."""
        log.info(
            "hedge order %d filled for %d lots at %d average price",
            client_order_id, volume, price,
        )
        order = self.state.active_orders.get(client_order_id)
        if order is None or not order.is_hedge:
            return

        order.filled_volume += volume
        self.state.ledger.apply_fill(order.instrument, order.side, volume)
        if order.remaining_volume == 0:
            self.close_order(client_order_id)
        else:
            order.state = OrderState.PARTIALLY_FILLED

    def on_order_status(
        self,
        client_order_id: int,
        fill_volume: int,
        remaining_volume: int,
        fees: int,
    ) -> None:
        order = self.state.active_orders.get(client_order_id)
        if order is None:
            log.debug("Status for untracked order %d ignored", client_order_id)
            return

        order.fees += fees
        self.state.total_fees += fees

        if remaining_volume == 0:
            self.close_order(client_order_id)
        elif fill_volume > 0:
            order.state = OrderState.PARTIALLY_FILLED
        else:
            order.state = OrderState.OPEN

    def on_error(self, client_order_id: int, message: str) -> None:
        log.warning("error with order %d: %s", client_order_id, message)
        if client_order_id != 0 and client_order_id in self.state.active_orders:
            self.on_order_status(client_order_id, 0, 0, 0)
        else:
            log.info("Error references no tracked order (%d); nothing to close", client_order_id)

    def close_order(self, client_order_id: int) -> bool:
        """Retire an order; False if it was already gone."""
        order = self.state.active_orders.pop(client_order_id, None)
        if order is None or order.is_closed:
            return False

        order.state = OrderState.CLOSED
        if self.state.bid_id == client_order_id:
            self.state.bid_id = 0
        elif self.state.ask_id == client_order_id:
            self.state.ask_id = 0

        self.state.ledger.release(order.instrument, order.side, order.remaining_volume)
        log.debug(
            "Order %d closed (%s %s %d/%d filled)",
            client_order_id, order.instrument.name, order.side.name,
            order.filled_volume, order.volume,
        )
        return True

    # ── Helpers ────────────────────────────────────────────────────────────

    def _register(
        self,
        instrument: Instrument,
        side: Side,
        price: int,
        volume: int,
        lifespan: Optional[Lifespan],
        is_hedge: bool,
    ) -> ActiveOrder:
        order = ActiveOrder(
            client_order_id=self.state.take_order_id(),
            instrument=instrument,
            side=side,
            price=int(price),
            volume=int(volume),
            lifespan=lifespan,
            is_hedge=is_hedge,
        )
        self.state.active_orders[order.client_order_id] = order
        self.state.ledger.reserve(instrument, side, volume)
        return order

    def _send_insert(self, side: Side, price: int, volume: int, lifespan: Lifespan) -> ActiveOrder:
        order = self._register(Instrument.ETF, side, price, volume, lifespan, is_hedge=False)
        if side is Side.BUY:
            self.state.bid_id = order.client_order_id
        else:
            self.state.ask_id = order.client_order_id
        log.info("Insert %d: %s %d ETF @ %d", order.client_order_id, side.name, volume, price)
        try:
            self.gateway.send_insert_order(order.client_order_id, side, order.price, order.volume, lifespan)
        except Exception:
            self.close_order(order.client_order_id)
            raise
        return order

    def _send_hedge(self, side: Side, price: int, volume: int, lifespan: Optional[Lifespan]) -> ActiveOrder:
        order = self._register(Instrument.FUTURE, side, price, volume, lifespan, is_hedge=True)
        log.info("Hedge %d: %s %d FUTURE @ %d", order.client_order_id, side.name, volume, price)
        try:
            self.gateway.send_hedge_order(order.client_order_id, side, order.price, order.volume, lifespan)
        except Exception:
            self.close_order(order.client_order_id)
            raise
        return order
