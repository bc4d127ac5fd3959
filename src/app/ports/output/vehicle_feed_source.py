from __future__ import annotations

from abc import ABC, abstractmethod

from src.domain.models import AggregatedFeed


class IVehicleFeedSource(ABC):
    """Port for pulling the aggregated multi-agency vehicle feed."""

    @abstractmethod
    async def fetch_feed(self) -> AggregatedFeed:
        raise NotImplementedError
