"""Dry-run replay of a recorded ETF/FUTURE feed through the engine.

Pushes recorded book updates and trade ticks into an AutoTrader wired to a
LoggingGateway, so the signal and sizing decisions can be inspected without a
venue. Nothing here matches or fills orders.

Feed format (CSV, one top-of-book row per update):
    kind,instrument,sequence,ask_price,ask_volume,bid_price,bid_volume
    book,ETF,1,201,50,199,40
    book,FUTURE,1,101,30,99,25
    ticks,ETF,1,201,5,199,0
"""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from .book import Instrument
from .engine import AutoTrader

log = logging.getLogger(__name__)

FEED_COLUMNS = [
    "kind",
    "instrument",
    "sequence",
    "ask_price",
    "ask_volume",
    "bid_price",
    "bid_volume",
]

_KINDS = {"book", "ticks"}


def normalise_feed(frame: pd.DataFrame) -> pd.DataFrame:
    """Validate columns and coerce types; raises ValueError on a bad feed."""
    missing = [c for c in FEED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(f"feed is missing columns: {', '.join(missing)}")

    df = frame[FEED_COLUMNS].copy()
    df["kind"] = df["kind"].astype(str).str.strip().str.lower()
    df["instrument"] = df["instrument"].astype(str).str.strip().str.upper()

    bad_kind = sorted(set(df["kind"]) - _KINDS)
    if bad_kind:
        raise ValueError(f"unknown update kind(s): {', '.join(bad_kind)}")
    bad_inst = sorted(set(df["instrument"]) - set(Instrument.__members__))
    if bad_inst:
        raise ValueError(f"unknown instrument(s): {', '.join(bad_inst)}")

    int_cols = FEED_COLUMNS[2:]
    df[int_cols] = df[int_cols].fillna(0).astype("int64")
    return df.reset_index(drop=True)


def load_feed(path: Union[str, Path]) -> pd.DataFrame:
    return normalise_feed(pd.read_csv(path))


def replay_feed(trader: AutoTrader, frame: pd.DataFrame) -> int:
    """Deliver every row to the matching callback; returns rows delivered."""
    df = normalise_feed(frame)
    delivered = 0
    for row in df.itertuples(index=False):
        if trader.state.disconnected:
            log.warning("Replay stopped early: trader is disconnected")
            break
        callback = trader.on_order_book_update if row.kind == "book" else trader.on_trade_ticks
        callback(
            Instrument[row.instrument],
            int(row.sequence),
            [int(row.ask_price)],
            [int(row.ask_volume)],
            [int(row.bid_price)],
            [int(row.bid_volume)],
        )
        delivered += 1
    log.info("Replayed %d of %d feed rows", delivered, len(df))
    return delivered
