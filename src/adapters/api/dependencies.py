from __future__ import annotations

import os

from src.adapters.onebusaway import (
    HttpAgencyDirectory,
    HttpVehicleRosterProvider,
    OneBusAwayConfig,
)
from src.app.services.fleet_aggregator import FleetAggregator
from src.app.services.fleet_feed_service import FleetFeedService


def get_fleet_feed_service() -> FleetFeedService:
    config = OneBusAwayConfig.from_env()

    aggregator = FleetAggregator(
        roster_provider=HttpVehicleRosterProvider(config=config)
    )

    # Allow tuning via env without changing code.
    if os.getenv("FLEET_OPERATOR_TIMEOUT_S"):
        aggregator.operator_timeout_s = float(os.environ["FLEET_OPERATOR_TIMEOUT_S"])

    return FleetFeedService(
        directory=HttpAgencyDirectory(config=config),
        aggregator=aggregator,
    )
