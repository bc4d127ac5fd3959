from __future__ import annotations

from dataclasses import dataclass

from src.app.ports.output import IAgencyDirectory
from src.domain.exceptions import AggregateFailure, UpstreamError
from src.domain.models import Agency, AgencyDirectoryListing, AggregatedFeed

from .fleet_aggregator import FleetAggregator


@dataclass(slots=True)
class FleetFeedService:
    """Serves the unified vehicle feed and the agency directory pass-throughs."""

    directory: IAgencyDirectory
    aggregator: FleetAggregator

    async def current_feed(self) -> AggregatedFeed:
        try:
            listing = await self.directory.load_listing()
        except UpstreamError as exc:
            raise AggregateFailure(
                f"Failed to fetch agencies: {exc}", cause_kind=type(exc).__name__
            ) from exc

        return await self.aggregator.aggregate(
            listing.agencies, coverage=listing.coverage
        )

    async def agency_listing(self) -> AgencyDirectoryListing:
        return await self.directory.load_listing()

    async def agency(self, agency_id: str) -> Agency:
        return await self.directory.get_agency(agency_id)
