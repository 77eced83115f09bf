"""Venue enums and the latest top-of-book snapshot per instrument."""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional, Sequence


class Instrument(IntEnum):
    FUTURE = 0
    ETF = 1


class Side(IntEnum):
    SELL = 0
    BUY = 1

    @property
    def opposite(self) -> "Side":
        return Side.BUY if self is Side.SELL else Side.SELL


class Lifespan(IntEnum):
    FILL_AND_KILL = 0
    GOOD_FOR_DAY = 1


class UpdateKind(IntEnum):
    """Which market-data stream an update arrived on."""
    ORDER_BOOK = 0
    TRADE_TICKS = 1


@dataclass(frozen=True)
class BookSnapshot:
    """Latest top-of-book for one instrument.

    Overwritten on every update; the rolling midprice history lives in
    `rolling.PriceWindow`, never here. A price or volume of 0 means the level
    is empty (the market has not started on that side).
    """
    instrument:      Instrument
    sequence_number: int
    ask_prices:      tuple[int, ...]
    ask_volumes:     tuple[int, ...]
    bid_prices:      tuple[int, ...]
    bid_volumes:     tuple[int, ...]

    @classmethod
    def from_arrays(
        cls,
        instrument: Instrument,
        sequence_number: int,
        ask_prices: Sequence[int],
        ask_volumes: Sequence[int],
        bid_prices: Sequence[int],
        bid_volumes: Sequence[int],
    ) -> "BookSnapshot":
        if any(len(levels) == 0 for levels in (ask_prices, ask_volumes, bid_prices, bid_volumes)):
            raise ValueError("book update needs at least one level per side")
        return cls(
            instrument=Instrument(instrument),
            sequence_number=int(sequence_number),
            ask_prices=tuple(int(p) for p in ask_prices),
            ask_volumes=tuple(int(v) for v in ask_volumes),
            bid_prices=tuple(int(p) for p in bid_prices),
            bid_volumes=tuple(int(v) for v in bid_volumes),
        )

    @property
    def best_bid(self) -> int:
        return self.bid_prices[0]

    @property
    def best_ask(self) -> int:
        return self.ask_prices[0]

    @property
    def best_bid_volume(self) -> int:
        return self.bid_volumes[0]

    @property
    def best_ask_volume(self) -> int:
        return self.ask_volumes[0]

    @property
    def midprice(self) -> Optional[float]:
        """(best bid + best ask) / 2, or None until both sides are quoted."""
        if self.best_bid == 0 or self.best_ask == 0:
            return None
        return (self.best_bid + self.best_ask) / 2.0
