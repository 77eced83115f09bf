"""ETF/FUTURE pair-arbitrage autotrader: dry-run entry point.

Replays a recorded feed through the engine with a LoggingGateway, so every
signal, pair trade and sizing decision shows up in the log without touching
a venue. A live deployment wires AutoTrader's callbacks to the venue gateway
instead.

Usage:
    export ARB_LOT_SIZE=10          # optional overrides, also read from .env
    export ARB_Z_THRESHOLD=1.0
    export REPLAY_FEED="feeds/session.csv"

    python main.py                  # or: python main.py feeds/session.csv
"""

import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

# ── Load .env from the project root before reading any env vars ───────────────
load_dotenv(Path(__file__).parent / ".env")

from pair_arb import AutoTrader, EngineConfig, LoggingGateway, load_feed, replay_feed

# ── Logging ────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("autotrader")

REPLAY_FEED = os.environ.get("REPLAY_FEED", "")


def run(feed_path: str) -> AutoTrader:
    """Replay `feed_path` and log a short session summary."""
    config = EngineConfig()
    gateway = LoggingGateway()
    trader = AutoTrader(gateway, config)
    log.info(
        "Dry run: lot=%d  limit=±%d  tick=%d  z=%.2f  window=%d  reserve_on_send=%s",
        config.lot_size, config.position_limit, config.tick_size,
        config.z_threshold, config.window_length, config.reserve_on_send,
    )

    frame = load_feed(feed_path)
    replay_feed(trader, frame)

    inserts = sum(1 for m in gateway.sent if m["kind"] == "insert")
    hedges = sum(1 for m in gateway.sent if m["kind"] == "hedge")
    log.info(
        "Done: %d spread samples, %d inserts, %d hedges, %d still active, last signal %s",
        trader.state.tracker.spread_count, inserts, hedges,
        len(trader.state.active_orders), trader.state.signal.value,
    )
    trader.log_positions()
    return trader


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    path = sys.argv[1] if len(sys.argv) > 1 else REPLAY_FEED
    if not path:
        print(
            "ERROR: no feed to replay.\n"
            "  python main.py <feed.csv>\n"
            "  or export REPLAY_FEED='<feed.csv>'\n"
        )
        sys.exit(1)

    try:
        run(path)
    except (OSError, ValueError) as exc:
        log.error("Replay failed: %s", exc)
        sys.exit(1)
