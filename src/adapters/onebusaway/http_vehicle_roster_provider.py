from __future__ import annotations

from dataclasses import dataclass

import httpx

from src.app.ports.output import IVehicleRosterProvider
from src.domain.models import AgencyRoster

from .config import OneBusAwayConfig, async_client
from .fetch import get_json
from .payloads import parse_roster


@dataclass(slots=True)
class HttpVehicleRosterProvider(IVehicleRosterProvider):
    """Fetches one operator's vehicles from OneBusAway `vehicles-for-agency`."""

    config: OneBusAwayConfig | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = OneBusAwayConfig.from_env()

    async def fetch_roster(self, agency_id: str) -> AgencyRoster:
        cfg = self.config or OneBusAwayConfig.from_env()
        key = cfg.require_api_key()

        async with async_client(cfg, self.transport) as client:
            payload = await get_json(
                client,
                cfg.url(f"vehicles-for-agency/{agency_id}.json"),
                what=f"vehicles-for-agency {agency_id}",
                params={"key": key},
            )
        return parse_roster(payload, agency_id=agency_id)
