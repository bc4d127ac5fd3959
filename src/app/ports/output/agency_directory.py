from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import Agency, AgencyDirectoryListing


class IAgencyDirectory(ABC):
    """Port for resolving the known transit operators and their metadata."""

    @abstractmethod
    async def load_listing(self) -> AgencyDirectoryListing:
        raise NotImplementedError

    async def list_agencies(self) -> tuple[Agency, ...]:
        listing = await self.load_listing()
        return listing.ordered_agencies()

    @abstractmethod
    async def get_agency(self, agency_id: str) -> Agency:
        raise NotImplementedError
