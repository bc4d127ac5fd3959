from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import AgencyRoster


class IVehicleRosterProvider(ABC):
    """Port for fetching the vehicle roster of a single operator."""

    @abstractmethod
    async def fetch_roster(self, agency_id: str) -> AgencyRoster:
        raise NotImplementedError
