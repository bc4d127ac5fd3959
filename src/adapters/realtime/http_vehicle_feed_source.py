from __future__ import annotations

import os
from dataclasses import dataclass, replace

import httpx

from src.adapters.onebusaway.fetch import get_json
from src.adapters.onebusaway.payloads import parse_aggregated_feed
from src.app.ports.output import IVehicleFeedSource
from src.domain.models import Agency, AggregatedFeed, VehicleRecord

DEFAULT_FEED_URL = "http://localhost:8000/api/vehicles"


@dataclass(slots=True)
class HttpVehicleFeedSource(IVehicleFeedSource):
    """Pulls the aggregated vehicle feed from a deployed `/api/vehicles`.

    Env vars:
      - FLEET_FEED_URL: aggregation endpoint (default localhost:8000)
      - FLEET_FEED_HEADERS: optional headers, as 'Key:Value;Key2:Value2'
      - FLEET_FEED_TIMEOUT_S: request timeout (default 10)
    """

    url: str | None = None
    headers_raw: str | None = None
    timeout_s: float = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.url is None:
            self.url = os.getenv("FLEET_FEED_URL") or DEFAULT_FEED_URL
        if self.headers_raw is None:
            self.headers_raw = os.getenv("FLEET_FEED_HEADERS")
        if os.getenv("FLEET_FEED_TIMEOUT_S"):
            self.timeout_s = float(os.environ["FLEET_FEED_TIMEOUT_S"])

    def _headers(self) -> dict[str, str]:
        raw = (self.headers_raw or "").strip()
        if not raw:
            return {}
        headers: dict[str, str] = {}
        for part in raw.split(";"):
            k, sep, v = part.partition(":")
            if sep and k.strip():
                headers[k.strip()] = v.strip()
        return headers

    async def fetch_feed(self) -> AggregatedFeed:
        async with httpx.AsyncClient(
            timeout=self.timeout_s, headers=self._headers(), transport=self.transport
        ) as client:
            payload = await get_json(client, str(self.url), what="vehicle feed")

        feed = parse_aggregated_feed(payload)
        return replace(feed, vehicles=tuple(_with_agency(v) for v in feed.vehicles))


def _with_agency(vehicle: VehicleRecord) -> VehicleRecord:
    # Feeds without agency metadata still get a named placeholder per operator.
    if vehicle.agency is not None or not vehicle.agency_id:
        return vehicle
    return replace(
        vehicle,
        agency=Agency(id=vehicle.agency_id, name=f"Agency {vehicle.agency_id}"),
    )
