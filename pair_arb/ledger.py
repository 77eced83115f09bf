"""Net position per instrument against the hard position limit."""

import logging

from .book import Instrument, Side

log = logging.getLogger(__name__)


class PositionLedger:
    """Mirror of the venue's positions, moved only by confirmed fills.

    Key responsibilities:
      - Answer `can_trade()` before any order is sent, so no accepted order
        can push |position| past `position_limit`.
      - Cap each order at `min(lot_size, displayed volume)`.

    In-flight race: by default nothing is reserved at send time, so two
    orders sent before either fills can each pass `can_trade()` against the
    same headroom. With `reserve_on_send=True` unfilled volume is counted
    against the limit until it fills or the order closes.
    """

    def __init__(self, position_limit: int = 100, lot_size: int = 10, reserve_on_send: bool = False):
        self.position_limit = int(position_limit)
        self.lot_size = int(lot_size)
        self.reserve_on_send = bool(reserve_on_send)
        self._positions: dict[Instrument, int] = {inst: 0 for inst in Instrument}
        self._reserved: dict[tuple[Instrument, Side], int] = {
            (inst, side): 0 for inst in Instrument for side in Side
        }

    def position(self, instrument: Instrument) -> int:
        return self._positions[Instrument(instrument)]

    def reserved(self, instrument: Instrument, side: Side) -> int:
        return self._reserved[(Instrument(instrument), Side(side))]

    def order_volume(self, displayed_volume: int) -> int:
        """Never more than one lot, never more than the book shows."""
        return max(0, min(self.lot_size, int(displayed_volume)))

    def headroom(self, instrument: Instrument, side: Side) -> int:
        pos = self.position(instrument)
        side = Side(side)
        if side is Side.BUY:
            room = self.position_limit - pos - self.reserved(instrument, Side.BUY)
        else:
            room = self.position_limit + pos - self.reserved(instrument, Side.SELL)
        return max(0, room)

    def can_trade(self, instrument: Instrument, side: Side, volume: int) -> bool:
        volume = int(volume)
        if volume <= 0:
            return False
        return volume <= self.headroom(instrument, side)

    def apply_fill(self, instrument: Instrument, side: Side, volume: int) -> int:
        """Apply a confirmed fill and return the new position."""
        instrument, side, volume = Instrument(instrument), Side(side), int(volume)
        delta = volume if side is Side.BUY else -volume
        self._positions[instrument] += delta
        self.release(instrument, side, volume)
        pos = self._positions[instrument]
        if abs(pos) > self.position_limit:
            log.error(
                "%s position %+d is beyond the ±%d limit",
                instrument.name, pos, self.position_limit,
            )
        return pos

    def reserve(self, instrument: Instrument, side: Side, volume: int) -> None:
        if not self.reserve_on_send:
            return
        self._reserved[(Instrument(instrument), Side(side))] += int(volume)

    def release(self, instrument: Instrument, side: Side, volume: int) -> None:
        key = (Instrument(instrument), Side(side))
        self._reserved[key] = max(0, self._reserved[key] - int(volume))
