from __future__ import annotations

import asyncio
import logging
import os
from collections import Counter

from src.adapters.realtime import HttpVehicleFeedSource
from src.app.services.live_feed_poller import LiveFeedPoller, PollerUpdate
from src.app.services.vehicle_presentation import (
    format_update_time,
    summarize,
    vehicle_bounds,
)

logger = logging.getLogger("fleet.watcher")


def _log_update(update: PollerUpdate) -> None:
    if update.error:
        kept = len(update.snapshot.vehicles) if update.snapshot else 0
        logger.warning("Feed error: %s (keeping %d vehicles)", update.error, kept)
        return

    snapshot = update.snapshot
    if snapshot is None:
        return

    summaries = [summarize(v) for v in snapshot.vehicles]
    modes = Counter(s.mode_label for s in summaries)
    late = sum(1 for s in summaries if s.schedule and s.schedule.severity == "major")

    logger.info(
        "Last update %s - active vehicles: %d (%s); %d running >5 min off schedule",
        format_update_time(snapshot.current_time),
        len(summaries),
        ", ".join(f"{label}: {n}" for label, n in modes.most_common()) or "none",
        late,
    )
    bounds = vehicle_bounds(snapshot.vehicles)
    if bounds is not None:
        logger.debug("Bounds S%.4f W%.4f N%.4f E%.4f", *bounds)


async def run() -> None:
    interval_s = float(os.getenv("FLEET_POLL_INTERVAL_S", "15"))
    loop = os.getenv("WATCHER_LOOP", "1").strip().lower() not in {"0", "false", "no"}

    poller = LiveFeedPoller(feed_source=HttpVehicleFeedSource(), interval_s=interval_s)
    poller.subscribe(_log_update)

    await poller.start()
    try:
        if not loop:
            await poller.settle()
            return
        while True:
            await asyncio.sleep(3600)
    finally:
        await poller.stop()


def main() -> None:
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
