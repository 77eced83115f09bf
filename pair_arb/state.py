"""Engine state: everything the core owns, held in one explicit object."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .book import BookSnapshot, Instrument, Lifespan, Side, UpdateKind
from .config import EngineConfig
from .ledger import PositionLedger
from .rolling import RollingStatisticsTracker
from .signals import SignalState


class OrderState(Enum):
    PENDING = "PENDING"                    # sent, not yet acknowledged
    OPEN = "OPEN"                          # acknowledged, nothing filled
    PARTIALLY_FILLED = "PARTIALLY_FILLED"
    CLOSED = "CLOSED"


@dataclass
class ActiveOrder:
    """One order we sent and have not yet seen closed."""
    client_order_id: int
    instrument:      Instrument
    side:            Side
    price:           int
    volume:          int
    lifespan:        Optional[Lifespan] = None
    is_hedge:        bool               = False
    filled_volume:   int                = 0
    fees:            int                = 0
    state:           OrderState         = OrderState.PENDING

    @property
    def remaining_volume(self) -> int:
        return max(0, self.volume - self.filled_volume)

    @property
    def is_closed(self) -> bool:
        return self.state is OrderState.CLOSED


@dataclass
class EngineState:
    """Mutable trading state passed by reference into every handler.

    Attributes:
        config:        Tunables this state was built from.
        tracker:       Midprice windows and spread history.
        ledger:        Net positions per instrument.
        snapshots:     Latest top-of-book per instrument (overwritten).
        last_sequence: Highest sequence number seen per (stream, instrument).
        active_orders: Orders sent and not yet closed, by client order id.
        signal:        Verdict from the most recent update cycle.
        bid_id:        Client id of the latest ETF buy insert, 0 when none.
        ask_id:        Client id of the latest ETF sell insert, 0 when none.
        next_order_id: Next client order id to hand out (ids are never reused).
        total_fees:    Fees reported by the venue across all orders.
        disconnected:  Set once the venue connection is lost; terminal.
    """
    config:        EngineConfig
    tracker:       RollingStatisticsTracker
    ledger:        PositionLedger
    snapshots:     dict[Instrument, BookSnapshot]        = field(default_factory=dict)
    last_sequence: dict[tuple[UpdateKind, Instrument], int] = field(default_factory=dict)
    active_orders: dict[int, ActiveOrder]                = field(default_factory=dict)
    signal:        SignalState                           = SignalState.NEUTRAL
    bid_id:        int                                   = 0
    ask_id:        int                                   = 0
    next_order_id: int                                   = 1
    total_fees:    int                                   = 0
    disconnected:  bool                                  = False

    @classmethod
    def initial(cls, config: Optional[EngineConfig] = None) -> "EngineState":
        """Fresh state: zero positions, empty windows, no orders, connected."""
        config = config or EngineConfig()
        return cls(
            config=config,
            tracker=RollingStatisticsTracker(window_length=config.window_length),
            ledger=PositionLedger(
                position_limit=config.position_limit,
                lot_size=config.lot_size,
                reserve_on_send=config.reserve_on_send,
            ),
        )

    def take_order_id(self) -> int:
        order_id = self.next_order_id
        self.next_order_id += 1
        return order_id
