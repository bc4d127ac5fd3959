from __future__ import annotations

from dataclasses import dataclass

import httpx

from src.app.ports.output import IAgencyDirectory
from src.domain.exceptions import AgencyNotFound, UpstreamUnavailable
from src.domain.models import Agency, AgencyDirectoryListing

from .config import OneBusAwayConfig, async_client
from .fetch import get_json
from .payloads import parse_agency_entry, parse_directory


@dataclass(slots=True)
class HttpAgencyDirectory(IAgencyDirectory):
    """Agency directory backed by OneBusAway `agencies-with-coverage`.

    Env vars (via OneBusAwayConfig.from_env):
      - ONEBUSAWAY_API_KEY: required; absence raises ConfigMissing
      - ONEBUSAWAY_BASE_URL: API host (default Puget Sound)
      - ONEBUSAWAY_TIMEOUT_S: request timeout (default 10)
    """

    config: OneBusAwayConfig | None = None
    transport: httpx.AsyncBaseTransport | None = None

    def __post_init__(self) -> None:
        if self.config is None:
            self.config = OneBusAwayConfig.from_env()

    async def load_listing(self) -> AgencyDirectoryListing:
        cfg = self.config or OneBusAwayConfig.from_env()
        key = cfg.require_api_key()

        async with async_client(cfg, self.transport) as client:
            payload = await get_json(
                client,
                cfg.url("agencies-with-coverage.json"),
                what="agencies-with-coverage",
                params={"key": key},
            )
        return parse_directory(payload)

    async def get_agency(self, agency_id: str) -> Agency:
        cfg = self.config or OneBusAwayConfig.from_env()
        key = cfg.require_api_key()

        async with async_client(cfg, self.transport) as client:
            try:
                payload = await get_json(
                    client,
                    cfg.url(f"agency/{agency_id}.json"),
                    what=f"agency {agency_id}",
                    params={"key": key},
                )
                return parse_agency_entry(payload, agency_id=agency_id)
            except UpstreamUnavailable as exc:
                if exc.status_code == 404:
                    raise AgencyNotFound(f"Unknown agency: {agency_id}") from exc
                raise
