"""Outbound interface to the trading venue.

The venue connection itself (transport, framing, auth) lives outside this
package. Anything that implements `Gateway` can sit behind the engine; sends
are fire-and-forget and their outcome comes back later as a callback.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from .book import Lifespan, Side

log = logging.getLogger(__name__)


class Gateway(ABC):

    @abstractmethod
    def send_insert_order(
        self,
        client_order_id: int,
        side: Side,
        price: int,
        volume: int,
        lifespan: Lifespan,
    ) -> None:
        """Insert a limit order on the ETF book."""

    @abstractmethod
    def send_hedge_order(
        self,
        client_order_id: int,
        side: Side,
        price: int,
        volume: int,
        lifespan: Optional[Lifespan] = None,
    ) -> None:
        """Send a hedge order on the future."""

    @abstractmethod
    def send_cancel_order(self, client_order_id: int) -> None:
        """Cancel a resting insert order."""


class LoggingGateway(Gateway):
    """Dry-run gateway: logs and records every outbound message, sends nothing."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []

    def send_insert_order(self, client_order_id, side, price, volume, lifespan):
        self._record("insert", client_order_id, side=Side(side), price=price, volume=volume, lifespan=lifespan)

    def send_hedge_order(self, client_order_id, side, price, volume, lifespan=None):
        self._record("hedge", client_order_id, side=Side(side), price=price, volume=volume, lifespan=lifespan)

    def send_cancel_order(self, client_order_id):
        self._record("cancel", client_order_id)

    def _record(self, kind: str, client_order_id: int, **fields: Any) -> None:
        msg = {"kind": kind, "client_order_id": client_order_id, **fields}
        self.sent.append(msg)
        if kind == "cancel":
            log.info("[dry-run] cancel %d", client_order_id)
        else:
            log.info(
                "[dry-run] %s %d: %s %d @ %d",
                kind, client_order_id, msg["side"].name, msg["volume"], msg["price"],
            )
